from gode_check.cli import main

raise SystemExit(main())
