# =============================================================================
# limesurvey_tools/surveys.py  —  Survey discovery, properties and quotas
# =============================================================================
#
# TOOLS:
#   list_surveys                    every survey the user may access
#   find_survey                     search by ID or title, newest first
#   get_survey_properties           survey settings
#   get_survey_language_properties  per-language texts and settings
#   get_survey_languages            base + additional languages
#   activate_survey                 (mutating) activate an inactive survey
#   get_quota_information           one quota, or every quota of a survey
# =============================================================================

from typing import Annotated, Optional, Union

from pydantic import Field

from limesurvey_core.formatting import find_surveys, survey_languages
from limesurvey_tools.console import log_status
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import Language, SettingNames, SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool


class SurveyTools(ToolGroup):

    @tool("list_surveys", "Lists all surveys that the authenticated user has permission to access")
    async def list_surveys(self) -> ToolResponse:
        try:
            surveys = await self.gateway.list_surveys()
        except Exception as exc:
            return ToolResponse.failure("Error listing surveys", exc)
        return ToolResponse.ok("List of surveys retrieved successfully", surveys)

    @tool(
        "find_survey",
        "Finds surveys by ID or name (partial matches allowed), sorted by newest first",
    )
    async def find_survey(
        self,
        search_term: Annotated[
            str, Field(description="Survey ID or partial/full survey name to search for")
        ],
        limit: Annotated[int, Field(description="Maximum number of results to return")] = 10,
    ) -> ToolResponse:
        """Client-side search over list_surveys.

        An exact survey ID match or a case-insensitive substring of the
        title qualifies.  LimeSurvey answers list_surveys with a status
        object instead of a list when there is nothing to list.
        """
        try:
            surveys = await self.gateway.list_surveys()
        except Exception as exc:
            return ToolResponse.failure("Error finding surveys", exc)

        if not isinstance(surveys, list) or not surveys:
            return ToolResponse.text("No surveys found in the system.")

        matches = find_surveys(surveys, search_term, limit)
        log_status(f"{len(matches)} of {len(surveys)} surveys match '{search_term}'")
        if not matches:
            return ToolResponse.text(f"No surveys found matching '{search_term}'.")
        return ToolResponse.ok(
            f"Found {len(matches)} survey(s) matching '{search_term}' (showing newest first):",
            matches,
        )

    @tool("get_survey_properties", "Gets detailed properties of a specific survey")
    async def get_survey_properties(
        self,
        survey_id: SurveyId,
        settings: SettingNames = None,
    ) -> ToolResponse:
        try:
            properties = await self.gateway.get_survey_properties(
                survey_id, blank_to_none(settings)
            )
        except Exception as exc:
            return ToolResponse.failure("Error retrieving survey properties", exc)
        return ToolResponse.ok(
            f"Survey properties for survey ID {survey_id} retrieved successfully", properties
        )

    @tool("get_survey_language_properties", "Gets language specific properties for a survey")
    async def get_survey_language_properties(
        self,
        survey_id: SurveyId,
        language: Annotated[str, Field(description="The language code")],
        settings: SettingNames = None,
    ) -> ToolResponse:
        try:
            properties = await self.gateway.get_language_properties(
                survey_id, blank_to_none(settings), blank_to_none(language)
            )
        except Exception as exc:
            return ToolResponse.failure("Error retrieving language properties", exc)
        return ToolResponse.ok(
            f"Language properties for survey ID {survey_id} ({language}) retrieved successfully",
            properties,
        )

    @tool("get_survey_languages", "Gets available languages for a specific survey")
    async def get_survey_languages(self, survey_id: SurveyId) -> ToolResponse:
        try:
            properties = await self.gateway.get_survey_properties(
                survey_id, ["language", "additional_languages"]
            )
        except Exception as exc:
            return ToolResponse.failure("Error retrieving survey languages", exc)

        languages = survey_languages(properties)
        if not languages:
            return ToolResponse.ok(f"No languages reported for survey ID {survey_id}", properties)
        return ToolResponse.text(f"Languages for survey ID {survey_id}: {', '.join(languages)}")

    @tool(
        "activate_survey",
        "Activates a survey that is currently inactive",
        read_only=False,
    )
    async def activate_survey(
        self,
        survey_id: Annotated[str, Field(description="The ID of the survey to activate")],
    ) -> ToolResponse:
        try:
            result = await self.gateway.activate_survey(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error activating survey", exc)
        return ToolResponse.ok(f"Survey ID {survey_id} activated successfully", result)

    @tool("get_quota_information", "Gets quota information for a survey")
    async def get_quota_information(
        self,
        survey_id: SurveyId,
        quota_id: Annotated[
            Optional[Union[int, str]],
            Field(description="Optional: Specific quota ID (if omitted, returns all quotas)"),
        ] = None,
        language: Annotated[
            Optional[str], Field(description="Optional: Language for quota descriptions")
        ] = None,
    ) -> ToolResponse:
        """Describe one quota, or list every quota of the survey.

        Args:
            survey_id: Survey the quotas belong to.
            quota_id: When given, only this quota's properties are fetched.
            language: Language of the quota messages (single quota only).

        Returns:
            Summary line plus JSON, or a "No quota(s) found" line when
            LimeSurvey returns nothing.
        """
        quota_id = blank_to_none(quota_id)
        try:
            if quota_id is not None:
                result = await self.gateway.get_quota_properties(
                    quota_id, None, blank_to_none(language)
                )
            else:
                result = await self.gateway.list_quotas(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error retrieving quota information", exc)

        if not result:
            if quota_id is not None:
                return ToolResponse.text(f"No quota found with ID {quota_id} for survey {survey_id}")
            return ToolResponse.text(f"No quotas found for survey {survey_id}")

        if quota_id is not None:
            summary = f"Quota information for quota ID {quota_id} retrieved successfully"
        else:
            summary = f"All quota information for survey ID {survey_id} retrieved successfully"
        return ToolResponse.ok(summary, result)
