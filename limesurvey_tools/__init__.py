# =============================================================================
# limesurvey_tools/__init__.py
# =============================================================================
# FastMCP tool adapters for the LimeSurvey RemoteControl API.
#
# ARCHITECTURAL ROLE:
#   limesurvey_tools/ is the translation layer between MCP clients and
#   limesurvey_core/.  Each tool group module:
#     1. Declares adapters with typed, described parameters
#     2. Calls exactly one LimeSurveyGateway method per adapter
#     3. Turns the raw result into a ToolResponse (JSON, preview or size)
#     4. Catches every failure and reports it as an error response
#
# WHAT ADAPTERS DO NOT DO:
#   - They do NOT talk HTTP or manage the session key (that's the gateway)
#   - They do NOT decide what is visible in read-only mode (that's the
#     registry, from each tool's read_only flag)
# =============================================================================

from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.mcp_server import create_server
from limesurvey_tools.registry import ToolGroup, register_tools, tool

__all__ = ["ToolGroup", "ToolResponse", "create_server", "register_tools", "tool"]
