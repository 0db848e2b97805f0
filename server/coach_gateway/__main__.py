"""Run the gateway with uvicorn: ``python -m coach_gateway``."""

from __future__ import annotations

import uvicorn

from .config import config


def main() -> None:
    uvicorn.run("coach_gateway.app:app", host=config.host, port=config.port)


if __name__ == "__main__":
    main()
