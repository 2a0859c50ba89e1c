# =============================================================================
# limesurvey_tools/console.py  —  Colored tool-call logging
# =============================================================================
# Everything here logs to STDERR through the standard logging module
# (main.configure_logging points the root handler there); STDOUT carries
# the MCP stdio transport.
#
# ANSI COLOR CODES:
#     - CYAN for incoming tool calls (tool name + parameters)
#     - GREEN for responses
#     - YELLOW for intermediate status/progress messages
#     - RED for error responses
# =============================================================================

import logging

from limesurvey_tools.envelope import ToolResponse

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"

# Base64 payloads and response bodies can be megabytes long.
_MAX_VALUE_CHARS = 80
_MAX_RESPONSE_CHARS = 200

logger = logging.getLogger("limesurvey_tools")


def _abbreviate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit - 3]}..."


def log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(
        f"{k}={_abbreviate(repr(v), _MAX_VALUE_CHARS)}" for k, v in params.items()
    )
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def log_response(tool_name: str, response: ToolResponse) -> ToolResponse:
    """Log the tool response (GREEN, or RED for errors), then return it."""
    first = response.content[0] if response.content else ""
    summary = _abbreviate(first.replace("\n", " "), _MAX_RESPONSE_CHARS)
    if response.is_error:
        logger.warning(f"{_RED}  ← {tool_name} failed: {summary}{_RESET}")
    else:
        logger.info(
            f"{_GREEN}  ← {tool_name} response ({len(response.content)} item(s)): {summary}{_RESET}"
        )
    return response
