# =============================================================================
# limesurvey_core/config.py  —  Process configuration
# =============================================================================
#
# All settings come from environment variables.  main.py calls
# load_dotenv() first, so a local .env file works the same way as real
# environment variables:
#
#   LIMESURVEY_API_URL      RemoteControl endpoint
#   LIMESURVEY_USERNAME     API user
#   LIMESURVEY_PASSWORD     API password
#   LIMESURVEY_TIMEOUT      HTTP timeout in seconds (default 30)
#   READONLY_MODE=true      register only read-only tools
#   MCP_TRANSPORT           stdio | sse | http (default stdio)
#   HOST / PORT             bind address for sse/http (default 0.0.0.0:3000)
#   LOG_LEVEL               root log level (default INFO)
#   LOG_DIR                 also write combined.log / error.log here
#
# Credentials are NOT validated here.  The gateway checks them the first
# time it needs a session key, so a server without credentials still
# starts and reports a ConfigurationError per tool call.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from limesurvey_core.errors import ConfigurationError

DEFAULT_API_URL = "http://localhost/limesurvey/index.php/admin/remotecontrol"
TRANSPORTS = ("stdio", "sse", "http")


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 30.0
    readonly_mode: bool = False
    transport: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ConfigurationError: a numeric value does not parse, or the
                transport name is unknown.
        """
        env = os.environ if environ is None else environ

        transport = env.get("MCP_TRANSPORT", "stdio").strip().lower()
        if transport not in TRANSPORTS:
            raise ConfigurationError(
                f"MCP_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got '{transport}'"
            )

        return cls(
            api_url=env.get("LIMESURVEY_API_URL") or DEFAULT_API_URL,
            username=env.get("LIMESURVEY_USERNAME") or None,
            password=env.get("LIMESURVEY_PASSWORD") or None,
            timeout=_number(env, "LIMESURVEY_TIMEOUT", 30.0, float),
            readonly_mode=env.get("READONLY_MODE", "false").lower() == "true",
            transport=transport,
            host=env.get("HOST", "0.0.0.0"),
            port=_number(env, "PORT", 3000, int),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_dir=env.get("LOG_DIR") or None,
        )


def _number(env: Mapping[str, str], name: str, default, kind):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from None
