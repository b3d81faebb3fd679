"""Main entry point for ``python -m libraryrentals``."""

from libraryrentals.cli import app


def main():
    """Run the library CLI."""
    app()


if __name__ == "__main__":
    main()
