# =============================================================================
# limesurvey_tools/mcp_server.py  —  FastMCP server for LimeSurvey
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the FastMCP server and registers every tool group against one
#   shared LimeSurveyGateway.  main.py decides the transport and runs it.
#
# HOW A TOOL CALL FLOWS:
#   1. The MCP client calls a tool by name (e.g. "export_responses")
#   2. FastMCP validates the arguments against the adapter's signature
#   3. The adapter calls one gateway method; the gateway authenticates once
#      and POSTs the JSON-RPC request to LimeSurvey
#   4. The adapter turns the raw result into text (JSON, preview, size)
#   5. FastMCP returns that text, or an isError result on failure
#
# READ-ONLY MODE:
#   READONLY_MODE=true leaves every mutating tool unregistered; clients
#   only ever see the read-only subset.
# =============================================================================

import logging

from fastmcp import FastMCP

from limesurvey_core.config import Settings
from limesurvey_core.gateway import LimeSurveyGateway
from limesurvey_tools.files import FileTools
from limesurvey_tools.groups import GroupTools
from limesurvey_tools.participants import ParticipantTools
from limesurvey_tools.questions import QuestionTools
from limesurvey_tools.registry import ToolGroup, register_tools
from limesurvey_tools.responses import ResponseTools
from limesurvey_tools.site import SiteTools
from limesurvey_tools.statistics import StatisticsTools
from limesurvey_tools.survey_management import SurveyManagementTools
from limesurvey_tools.surveys import SurveyTools

logger = logging.getLogger(__name__)

SERVER_NAME = "LimeSurvey MCP"

TOOL_GROUPS: tuple[type[ToolGroup], ...] = (
    SurveyTools,
    SiteTools,
    QuestionTools,
    GroupTools,
    StatisticsTools,
    ResponseTools,
    ParticipantTools,
    SurveyManagementTools,
    FileTools,
)


def _instructions(read_only_mode: bool) -> str:
    if read_only_mode:
        return "MCP server that exposes LimeSurvey API read-only functionality"
    return "MCP server that exposes LimeSurvey API functionality"


def create_server(gateway: LimeSurveyGateway, settings: Settings) -> FastMCP:
    """Build the FastMCP server with every tool group registered.

    Args:
        gateway: Shared gateway; all tools use its session key.
        settings: Runtime settings; only ``readonly_mode`` is read here.

    Returns:
        A configured FastMCP instance, not yet running.
    """
    mcp = FastMCP(SERVER_NAME, instructions=_instructions(settings.readonly_mode))
    groups = [group_cls(gateway) for group_cls in TOOL_GROUPS]
    names = register_tools(mcp, groups, read_only_mode=settings.readonly_mode)

    mode = "read-only" if settings.readonly_mode else "full access"
    logger.info("Registered %d tools (%s mode)", len(names), mode)
    for index, name in enumerate(names, start=1):
        logger.info("  %d. %s", index, name)
    return mcp
