"""Module entrypoint for ``python -m ast_portal``."""

from ast_portal.cli import main

if __name__ == "__main__":
    main()
