"""Entry point for ``python -m pebblechat``."""

from pebblechat.cli import app

if __name__ == "__main__":
    app()
