# =============================================================================
# limesurvey_core/__init__.py
# =============================================================================
# This package contains everything that talks to LimeSurvey.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or any MCP type.  The gateway
#   speaks plain JSON-RPC over httpx; the formatting helpers are pure
#   functions.  The tool layer (limesurvey_tools/) wraps this package, never
#   the other way round.
# =============================================================================

from limesurvey_core.config import Settings
from limesurvey_core.errors import (
    AuthenticationError,
    ConfigurationError,
    LimeSurveyError,
    RemoteProcedureError,
    TransportError,
)
from limesurvey_core.gateway import LimeSurveyGateway

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "LimeSurveyError",
    "LimeSurveyGateway",
    "RemoteProcedureError",
    "Settings",
    "TransportError",
]
