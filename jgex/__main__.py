from jgex.cli import main

raise SystemExit(main())
