"""Allow ``python -m pythonbuild``."""

import sys

from .cli import main

sys.exit(main())
