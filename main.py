"""
Dynamics 365 query assistant entry point.

Runs the MCP server over stdio, or the offline console demo.

Usage:
    MCP server:   python main.py
    Console mode: python main.py console
"""

import asyncio
import logging
import sys

from dynamics_assistant.config import settings

logger = logging.getLogger(__name__)


def _run_server_mode() -> None:
    """Serve the tools over stdio (live CRM when configured, sample data otherwise)."""
    from dynamics_assistant.server import run_stdio

    logger.info("Starting %s (live CRM: %s)", settings.server_name, settings.dynamics.is_live)
    asyncio.run(run_stdio())


def _run_console_mode() -> None:
    """Start the offline console demo (no credentials required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server_mode()
