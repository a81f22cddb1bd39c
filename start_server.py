#!/usr/bin/env python3
"""Launch the API with uvicorn, honouring the PORT environment variable."""

import logging
import os
import sys

import uvicorn

logger = logging.getLogger(__name__)

SRC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")


def resolve_port(value: str | None, default: int = 8000) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        logger.warning(f"Invalid PORT value '{value}', using default {default}")
        return default


def main() -> None:
    if SRC_PATH not in sys.path:
        sys.path.insert(0, SRC_PATH)
    uvicorn.run(
        "route_planner.main:app",
        host="0.0.0.0",
        port=resolve_port(os.environ.get("PORT")),
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
