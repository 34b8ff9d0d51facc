"""
Entry point for running the companion CLI as a module.

Usage:
    python -m companion demo
    python -m companion config --show
    python -m companion --help
"""

from companion.cli import app

if __name__ == "__main__":
    app()
