"""canvasgov CLI entry point."""

from canvasgov.cli import app

if __name__ == "__main__":
    app()
