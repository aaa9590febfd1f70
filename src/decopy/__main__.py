"""Allow ``python -m decopy``."""

import sys

from .main import main

sys.exit(main())
