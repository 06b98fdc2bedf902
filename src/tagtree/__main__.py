"""Allow ``python -m tagtree``."""

import sys

from tagtree.cli.main import main

sys.exit(main())
