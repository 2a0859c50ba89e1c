# =============================================================================
# limesurvey_tools/registry.py  —  Marking adapters and exposing them to MCP
# =============================================================================
#
# Adapters are async methods on ToolGroup subclasses, marked with @tool:
#
#     class SurveyTools(ToolGroup):
#         @tool("list_surveys", "Lists all surveys ...")
#         async def list_surveys(self) -> ToolResponse: ...
#
# register_tools() walks the groups and registers each marked method with
# FastMCP.  FastMCP derives the input schema from the method signature, so
# parameter types and Field descriptions on the adapter ARE the tool schema.
#
# The exposed wrapper:
#   - logs the call and the response (limesurvey_tools.console)
#   - turns a successful ToolResponse into TextContent items
#   - raises ToolError for an error ToolResponse; FastMCP reports it as an
#     isError result carrying the message
#
# In read-only mode, tools marked read_only=False are never registered, so
# clients cannot see or call them.
# =============================================================================

import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

from fastmcp.exceptions import ToolError
from mcp.types import TextContent, ToolAnnotations

from limesurvey_core.gateway import LimeSurveyGateway
from limesurvey_tools.console import log_request, log_response
from limesurvey_tools.envelope import ToolResponse

logger = logging.getLogger(__name__)

Adapter = Callable[..., Awaitable[ToolResponse]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    read_only: bool = True
    destructive: bool = False


def tool(name: str, description: str, *, read_only: bool = True, destructive: bool = False):
    """Mark a ToolGroup method as an MCP tool.

    Args:
        name: Tool name as clients see it.
        description: Tool description shown to clients.
        read_only: False for tools that change data; they are hidden in
            read-only mode.
        destructive: True for irreversible tools (deletes, resets).
    """
    spec = ToolSpec(name=name, description=description, read_only=read_only, destructive=destructive)

    def decorator(func):
        func.__tool_spec__ = spec
        return func

    return decorator


class ToolGroup:
    """A set of related adapters sharing one gateway."""

    def __init__(self, gateway: LimeSurveyGateway):
        self.gateway = gateway

    def tools(self) -> list[tuple[ToolSpec, Adapter]]:
        """Marked adapters in definition order, bound to this group."""
        found = []
        for attr, member in vars(type(self)).items():
            spec = getattr(member, "__tool_spec__", None)
            if spec is not None:
                found.append((spec, getattr(self, attr)))
        return found


def expose(mcp, spec: ToolSpec, adapter: Adapter) -> None:
    """Register one bound adapter with a FastMCP server."""

    @functools.wraps(adapter)
    async def call_tool(**arguments):
        log_request(spec.name, **arguments)
        response = log_response(spec.name, await adapter(**arguments))
        if response.is_error:
            raise ToolError(response.message)
        return [TextContent(type="text", text=item) for item in response.content]

    # Input schema from the adapter; no output schema from ToolResponse.
    call_tool.__signature__ = inspect.signature(adapter).replace(
        return_annotation=inspect.Signature.empty
    )
    call_tool.__annotations__ = {
        k: v for k, v in adapter.__annotations__.items() if k != "return"
    }

    mcp.tool(
        name=spec.name,
        description=spec.description,
        annotations=ToolAnnotations(
            readOnlyHint=spec.read_only,
            destructiveHint=spec.destructive,
        ),
    )(call_tool)


def register_tools(mcp, groups: Iterable[ToolGroup], read_only_mode: bool = False) -> list[str]:
    """Expose every marked adapter of ``groups``.

    Returns:
        Names of the registered tools, in registration order.
    """
    registered = []
    for group in groups:
        for spec, adapter in group.tools():
            if read_only_mode and not spec.read_only:
                logger.debug("Skipping %s in read-only mode", spec.name)
                continue
            expose(mcp, spec, adapter)
            registered.append(spec.name)
    return registered
