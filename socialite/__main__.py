"""Allow ``python -m socialite``."""

import sys

from .cli import main


sys.exit(main())
