"""Entry point for ``python -m page_autocrop``."""

from .cli import main

if __name__ == "__main__":
    main()
