#!/usr/bin/env python3
"""Launcher for the deck_toolkit HTTP API (Flask)."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if SRC.exists() and SRC.as_posix() not in sys.path:
    sys.path.insert(0, SRC.as_posix())

from dotenv import load_dotenv

from deck_toolkit.api import create_app
from deck_toolkit.common import configure_logging
from deck_toolkit.config import AppConfig


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the deck_toolkit API server")
    parser.add_argument("--host", default=os.getenv("DECK_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("DECK_PORT", "5000")))
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)

    load_dotenv()
    config = AppConfig.from_env()
    configure_logging(config.log_level)

    app = create_app(config)
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
