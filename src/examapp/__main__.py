"""ExamApp entrypoint.

Run with:
  python -m examapp
"""

import logging
import os

import uvicorn


def main() -> None:
    host = os.getenv("EXAMAPP_HOST", "0.0.0.0")
    port = int(os.getenv("EXAMAPP_PORT", "8000"))
    reload = os.getenv("EXAMAPP_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    logging.basicConfig(
        level=os.getenv("EXAMAPP_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("examapp.app:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
