from sievelab.cli import main

raise SystemExit(main())
