#!/usr/bin/env python3
"""
Teller Banking Demo Entry Point

Starts the FastAPI server with the configured document store.
"""

import sys

import uvicorn

from teller.config import get_config
from teller.logging_config import setup_logging


def run_server(host: str, port: int, debug: bool = False) -> None:
    """Run the FastAPI server"""
    uvicorn.run(
        "teller.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, config.log_format)

    print("🏦 Starting Teller Banking Demo...")
    print(f"💾 Storage: {config.storage_backend} ({config.data_dir})")
    print(f"🌐 API available at: http://localhost:{config.api_port}{config.api_prefix}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(host=config.api_host, port=config.api_port)
    except KeyboardInterrupt:
        print("\n👋 Shutting down Teller...")
    except Exception as e:
        logger.exception("Server failed to start")
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
