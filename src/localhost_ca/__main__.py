from localhost_ca.cli import main

raise SystemExit(main())
