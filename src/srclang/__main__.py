import sys

from srclang.cli import main

if __name__ == '__main__':
    sys.exit(main())
