#!/usr/bin/env python3
"""Run the Leekha Web API server."""

import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv


def main():
    """Run the server."""
    # Load .env file if it exists
    env_file = Path(__file__).parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)
        print(f"Loaded environment from {env_file}")

    logging.basicConfig(
        level=os.environ.get("LEEKHA_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "web.api:app",
        host=os.environ.get("LEEKHA_HOST", "127.0.0.1"),
        port=int(os.environ.get("LEEKHA_PORT", "8000")),
        reload=os.environ.get("LEEKHA_RELOAD", "").lower() == "true",
        log_level="info",
    )


if __name__ == "__main__":
    main()
