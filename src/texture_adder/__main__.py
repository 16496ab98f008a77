import sys

from texture_adder.cli import main

if __name__ == "__main__":
    sys.exit(main())
