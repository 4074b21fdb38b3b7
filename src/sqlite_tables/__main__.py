"""Allow running as ``python -m sqlite_tables``."""

import sys

from sqlite_tables.cli import main

sys.exit(main())
