# =============================================================================
# main.py  —  Entry Point for the LimeSurvey MCP server
# =============================================================================
#
# HOW TO RUN:
#   limesurvey-mcp                 (installed console script)
#   python main.py                 (from a checkout)
#
# WHAT HAPPENS:
#   1. Loads .env into the environment (python-dotenv)
#   2. Reads Settings from the environment (limesurvey_core/config.py)
#   3. Sends all logging to STDERR (and LOG_DIR, when set)
#   4. Builds the gateway and the FastMCP server (limesurvey_tools/)
#   5. Serves over the configured transport: stdio, sse or http
#   6. On exit (Ctrl+C, SIGTERM, client disconnect) releases the LimeSurvey
#      session key and closes the HTTP client
#
# STDOUT IS RESERVED:
#   With the stdio transport, STDOUT carries the MCP JSON messages.  The
#   banner and every log line go to STDERR.
# =============================================================================

import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from limesurvey_core.config import Settings
from limesurvey_core.errors import ConfigurationError
from limesurvey_core.gateway import LimeSurveyGateway
from limesurvey_tools.mcp_server import create_server

logger = logging.getLogger("limesurvey_mcp")

LOG_FORMAT = "%(asctime)s [MCP] %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"


# =============================================================================
# Logging
# =============================================================================
def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Route all logging to stderr, plus combined.log/error.log in ``log_dir``.

    Raises:
        ConfigurationError: ``level`` is not a logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got '{level}'")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(directory / "combined.log", encoding="utf-8"))
        error_handler = logging.FileHandler(directory / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_banner(settings: Settings) -> None:
    mode = "READ-ONLY" if settings.readonly_mode else "full access"
    print("=" * 70, file=sys.stderr)
    print("  LIMESURVEY MCP SERVER", file=sys.stderr)
    print(f"  API: {settings.api_url}", file=sys.stderr)
    print(f"  Transport: {settings.transport}  |  Mode: {mode}", file=sys.stderr)
    print("=" * 70, file=sys.stderr)


# =============================================================================
# Server lifecycle
# =============================================================================
async def shutdown(gateway: LimeSurveyGateway) -> None:
    """Release the session key and close the HTTP client.

    A failed release is logged; the client is closed either way.
    """
    try:
        released = await gateway.release_session_key()
        if not released:
            logger.warning("LimeSurvey session key could not be released")
    finally:
        await gateway.aclose()
    logger.info("LimeSurvey gateway closed")


async def serve(settings: Settings) -> None:
    # SIGTERM cancels this task like Ctrl+C does; the finally block still runs.
    task = asyncio.current_task()
    with contextlib.suppress(NotImplementedError):
        asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, task.cancel)

    gateway = LimeSurveyGateway.from_settings(settings)
    try:
        mcp = create_server(gateway, settings)
        if settings.transport == "stdio":
            await mcp.run_async(transport="stdio")
        else:
            logger.info(
                "Listening on %s:%d (%s transport)", settings.host, settings.port, settings.transport
            )
            await mcp.run_async(
                transport=settings.transport, host=settings.host, port=settings.port
            )
    finally:
        await shutdown(gateway)


# =============================================================================
# Script entry point
# =============================================================================
def main() -> None:
    load_dotenv()
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level, settings.log_dir)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    print_banner(settings)
    try:
        asyncio.run(serve(settings))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
