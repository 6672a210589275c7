"""
Clinic booking assistant entry point.

Serves the chat API over HTTP, or runs the offline console demo.

Usage:
    HTTP server:  python main.py
    Console mode: python main.py console
"""

import logging
import sys

from clinic_booking.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the HTTP chat API (uses Calendly unless MOCK_MODE=true)."""
    import uvicorn

    from clinic_booking.api import create_app

    logger.info("Mode: %s", "MOCK" if settings.provider.mock_mode else "LIVE")
    uvicorn.run(
        create_app(),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


def _run_console_mode() -> None:
    """Start the offline console demo (no API keys required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server()
