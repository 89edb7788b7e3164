from __future__ import annotations

import os

import uvicorn

from src.hothand.config import get_settings

if __name__ == "__main__":
    host = os.getenv("HOTHAND_HOST", "127.0.0.1")
    port = int(os.getenv("HOTHAND_PORT", os.getenv("PORT", "8000")))
    uvicorn.run(
        "src.hothand.main:app",
        host=host,
        port=port,
        reload=os.getenv("HOTHAND_RELOAD", "0") == "1",
        log_level=get_settings().log_level.lower(),
    )
