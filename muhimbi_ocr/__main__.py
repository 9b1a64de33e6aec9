from muhimbi_ocr.cli import main

raise SystemExit(main())
