"""Entry point for ``python -m restupdate``."""

import sys

from restupdate.app.main import main

if __name__ == "__main__":
    sys.exit(main())
