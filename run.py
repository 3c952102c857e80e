"""Start the API with uvicorn.

Host and port come from ``HOST`` and ``PORT`` (defaults ``0.0.0.0`` and
``5000``).

Usage:
    python run.py
"""
import os

import uvicorn


if __name__ == "__main__":
    uvicorn.run(
        "carservice.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
