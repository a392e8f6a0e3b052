"""Allow running as: python -m boardsync"""

from boardsync.cli import main

if __name__ == "__main__":
    main()
