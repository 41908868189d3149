"""
Package entry point.

Allows running the application via:

    python -m studywizard
"""

from studywizard.cli import main

if __name__ == "__main__":
    main()
