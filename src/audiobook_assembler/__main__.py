"""Allow ``python -m audiobook_assembler``."""

from .cli import main

if __name__ == "__main__":
    main()
