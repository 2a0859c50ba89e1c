# =============================================================================
# limesurvey_tools/site.py  —  Installation-wide information
# =============================================================================
#
#   get_available_languages   languages enabled on the installation
#   get_user_details          administration user accounts
# =============================================================================

from typing import Annotated, Optional

from pydantic import Field

from limesurvey_core.formatting import parse_available_languages
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import blank_to_none
from limesurvey_tools.registry import ToolGroup, tool


class SiteTools(ToolGroup):

    @tool("get_available_languages", "Gets available languages in the LimeSurvey installation")
    async def get_available_languages(self) -> ToolResponse:
        """Read the ``availablelanguages`` site setting.

        LimeSurvey stores it as a JSON-encoded string array; the decoded
        codes go in the summary line, the raw setting follows as JSON.
        """
        try:
            setting = await self.gateway.get_site_settings("availablelanguages")
        except Exception as exc:
            return ToolResponse.failure("Error retrieving available languages", exc)

        languages = parse_available_languages(setting)
        return ToolResponse.ok(
            f"Available languages in LimeSurvey: {', '.join(languages)}", setting
        )

    @tool(
        "get_user_details",
        "Gets details of LimeSurvey administration users, optionally filtered to one user",
    )
    async def get_user_details(
        self,
        user_id: Annotated[Optional[int], Field(description="Optional: ID of the user")] = None,
        username: Annotated[
            Optional[str], Field(description="Optional: Login name of the user")
        ] = None,
    ) -> ToolResponse:
        try:
            users = await self.gateway.list_users(user_id, blank_to_none(username))
        except Exception as exc:
            return ToolResponse.failure("Error retrieving user details", exc)
        return ToolResponse.ok("User details retrieved successfully", users)
