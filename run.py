"""Entry point for running the Collage API with Uvicorn.

Host and port are read from environment variables ``HOST`` and
``PORT``.  Defaults are ``0.0.0.0`` and ``8000``.  Application
configuration (admin password, token secret, Cloudinary credentials)
is read from the environment by ``collage_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from collage_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    try:
        await server.serve()
    except Exception:
        logging.exception("API server stopped with an error")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
