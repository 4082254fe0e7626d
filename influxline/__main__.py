from influxline.cli import main

raise SystemExit(main())
