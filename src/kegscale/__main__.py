from kegscale.cli import main

raise SystemExit(main())
