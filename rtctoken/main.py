#!/usr/bin/env python3
"""
Token Service Entry Point

This module provides the entry point for the rtctoken-server console script.
"""

import uvicorn

from rtctoken import config


def start():
    """Start the token service on the configured host and port."""
    from rtctoken.server import app

    print("🚀 Starting RTC Token Service...")
    print(f"📍 Listening on http://{config.HOST}:{config.PORT}")
    print(f"🔐 Token mode: {'secure' if config.APP_CERTIFICATE else 'tokenless'}")
    print("-" * 50)

    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="info",
    )


if __name__ == "__main__":
    start()
