# Entry point for `python -m ccs`
import sys

from ccs.cli import main

if __name__ == "__main__":
    sys.exit(main())
