"""Console entry point."""
from __future__ import annotations

from webacl.cli.app import app, enable_logging


def main() -> None:
    enable_logging()
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
