"""Main entry point for the plugin container example application."""
from __future__ import annotations

import sys

from dotenv import load_dotenv

from app.startup import run_application


def main() -> None:
    """Application entry point."""
    # Load .env early so configuration can see it
    load_dotenv()
    sys.exit(run_application())


__all__ = ["main"]

if __name__ == "__main__":
    main()
