from form_engine.cli import main

raise SystemExit(main())
