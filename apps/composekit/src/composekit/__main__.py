from composekit.cli import main

raise SystemExit(main())
