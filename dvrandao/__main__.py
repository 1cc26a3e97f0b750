from dvrandao.cli import main

raise SystemExit(main())
