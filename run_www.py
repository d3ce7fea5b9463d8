#!/usr/bin/env python3
from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    host = os.environ.get("CHAINSCOPE_HOST") or "0.0.0.0"
    port = int(os.environ.get("CHAINSCOPE_PORT") or "8000")
    level = (os.environ.get("CHAINSCOPE_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("webapp.server:app", host=host, port=port, reload=True)


if __name__ == "__main__":
    main()
