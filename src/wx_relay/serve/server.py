"""Launch the relay under uvicorn."""
from __future__ import annotations
import logging
import os

import uvicorn

from wx_relay.serve.fastapi_app import app

LOGGER = logging.getLogger("wxrelay.server")

def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))

    LOGGER.info("Relay listening on http://%s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")

if __name__ == "__main__":
    main()
