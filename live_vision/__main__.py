"""Allow ``python -m live_vision``."""

from .app import main

raise SystemExit(main())
