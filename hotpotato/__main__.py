"""Entry point for ``python -m hotpotato``."""

import sys

from .cli import main

sys.exit(main())
