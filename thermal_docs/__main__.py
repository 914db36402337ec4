from __future__ import annotations

from thermal_docs.cli import main

raise SystemExit(main())
