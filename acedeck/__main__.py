"""Main entry point when executing acedeck as a package.

This allows running the package using python -m acedeck.
"""

from acedeck.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
