import logging
import os

from dotenv import load_dotenv

load_dotenv()

import uvicorn  # noqa: E402

from console.api.main import app  # noqa: E402


def run() -> None:
    log_level = os.getenv("BLOG_API_LOG_LEVEL", "info").lower()
    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO))
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    run()
