"""Run the tracker API with uvicorn.

Run with:  python3 serve.py
"""

from __future__ import annotations

import os

import uvicorn

from api.main import create_app
from core.config import get_settings


def main() -> None:
    settings = get_settings()
    port = int(os.getenv("PORT", "8000"))
    host = "0.0.0.0" if settings.is_production else "127.0.0.1"
    uvicorn.run(create_app(), host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
