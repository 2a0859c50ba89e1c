# =============================================================================
# limesurvey_tools/responses.py  —  Reading and managing survey responses
# =============================================================================
#
# READ-ONLY TOOLS:
#   get_response_summary   counts (completed, incomplete, ...)
#   export_responses       base64 export; text formats get a decoded preview
#   get_response_by_id     one response, via a JSON export bounded to its ID
#
# MUTATING TOOLS (hidden in read-only mode):
#   add_response, update_response, delete_response, import_responses,
#   set_response_status
#   delete_all_responses, reset_survey_responses
#       irreversible; they do nothing unless the confirmation flag is true
# =============================================================================

import json
from typing import Annotated, Any, Optional

from pydantic import Field

from limesurvey_core.formatting import decode_base64_text, preview_export
from limesurvey_core.models import CompletionStatus, HeadingType, ResponseStatus, ResponseType
from limesurvey_tools.console import log_status
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import ConfirmDeletion, SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool

ResponseId = Annotated[str, Field(description="The ID of the response")]
ResponseData = Annotated[
    dict[str, Any],
    Field(description="The response data as an object with question codes as keys and answers as values"),
]


class ResponseTools(ToolGroup):

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------
    @tool("get_response_summary", "Gets summary information about a survey's collected responses")
    async def get_response_summary(self, survey_id: SurveyId) -> ToolResponse:
        try:
            summary = await self.gateway.get_summary(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error retrieving response summary", exc)
        return ToolResponse.ok(
            f"Response summary for survey ID {survey_id} retrieved successfully", summary
        )

    @tool("export_responses", "Exports responses from a survey in the specified format")
    async def export_responses(
        self,
        survey_id: SurveyId,
        document_type: Annotated[
            str, Field(description="Format of the export (csv, xls, pdf, html, json)")
        ] = "csv",
        language: Annotated[
            Optional[str], Field(description="Optional: Language for response export")
        ] = None,
        completion_status: Annotated[
            CompletionStatus, Field(description="Filter by completion status")
        ] = "all",
        heading_type: Annotated[HeadingType, Field(description="Type of headings")] = "code",
        response_type: Annotated[ResponseType, Field(description="Response type")] = "short",
        from_response_id: Annotated[
            Optional[int], Field(description="Optional: Export from this response ID")
        ] = None,
        to_response_id: Annotated[
            Optional[int], Field(description="Optional: Export up to this response ID")
        ] = None,
        fields: Annotated[
            Optional[list[str]], Field(description="Optional: Array of field names to export")
        ] = None,
        additional_options: Annotated[
            Optional[dict[str, Any]],
            Field(description="Optional: Additional options for export formatting"),
        ] = None,
        decode_output: Annotated[
            bool, Field(description="Whether to decode the base64 output for text formats")
        ] = True,
    ) -> ToolResponse:
        """Export responses and describe the result.

        Text formats (csv, json, txt, html) are decoded into a preview of at
        most 1000 characters when ``decode_output`` is set.  Binary formats,
        or a payload that fails to decode, are reported by size only.
        """
        try:
            data = await self.gateway.export_responses(
                survey_id,
                document_type,
                blank_to_none(language),
                completion_status,
                heading_type,
                response_type,
                from_response_id,
                to_response_id,
                blank_to_none(fields),
                blank_to_none(additional_options),
            )
        except Exception as exc:
            return ToolResponse.failure("Error exporting responses", exc)

        # LimeSurvey reports "no data" as a status object, not a document.
        if not isinstance(data, str):
            return ToolResponse.ok(
                f"Export of responses for survey ID {survey_id} returned no document", data
            )

        summary = f"Responses for survey ID {survey_id} exported successfully as {document_type}"
        preview = preview_export(data, document_type, decode=decode_output)
        if preview.decoded:
            log_status(f"Decoded {document_type} export (~{preview.size_kb} KB)")
            return ToolResponse.text(summary, f"Preview of exported data:\n\n{preview.text}")

        sized = f"{summary} (base64 encoded, ~{preview.size_kb} KB)"
        if preview.error:
            log_status(f"Could not decode {document_type} export: {preview.error}")
            return ToolResponse.text(sized, f"Failed to decode base64 data: {preview.error}")
        return ToolResponse.text(sized)

    @tool("get_response_by_id", "Gets data for a specific response in a survey")
    async def get_response_by_id(
        self,
        survey_id: SurveyId,
        response_id: Annotated[int, Field(description="The ID of the response to retrieve")],
    ) -> ToolResponse:
        try:
            data = await self.gateway.export_responses(
                survey_id,
                "json",
                from_response_id=response_id,
                to_response_id=response_id,
            )
            if isinstance(data, str):
                data = json.loads(decode_base64_text(data))
        except Exception as exc:
            return ToolResponse.failure("Error retrieving response", exc)
        return ToolResponse.ok(
            f"Response {response_id} for survey {survey_id} retrieved successfully", data
        )

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------
    @tool("add_response", "Adds a new response to a survey", read_only=False)
    async def add_response(self, survey_id: SurveyId, response_data: ResponseData) -> ToolResponse:
        try:
            result = await self.gateway.add_response(survey_id, response_data)
        except Exception as exc:
            return ToolResponse.failure("Error adding response", exc)
        return ToolResponse.text(f"Response added successfully to survey {survey_id} with ID: {result}")

    @tool("update_response", "Updates an existing response in a survey", read_only=False)
    async def update_response(
        self,
        survey_id: SurveyId,
        response_id: Annotated[str, Field(description="The ID of the response to update")],
        response_data: Annotated[
            dict[str, Any],
            Field(description="The updated response data as an object with question codes as keys and answers as values"),
        ],
    ) -> ToolResponse:
        # update_response identifies the row by the "id" key inside the data
        data = {**response_data, "id": response_id}
        try:
            result = await self.gateway.update_response(survey_id, data)
        except Exception as exc:
            return ToolResponse.failure("Error updating response", exc)
        return ToolResponse.text(
            f"Response {response_id} in survey {survey_id} updated successfully: {result}"
        )

    @tool(
        "delete_response",
        "Deletes a specific response from a survey",
        read_only=False,
        destructive=True,
    )
    async def delete_response(
        self,
        survey_id: SurveyId,
        response_id: Annotated[str, Field(description="The ID of the response to delete")],
    ) -> ToolResponse:
        try:
            result = await self.gateway.delete_response(survey_id, response_id)
        except Exception as exc:
            return ToolResponse.failure("Error deleting response", exc)
        return ToolResponse.ok(
            f"Response {response_id} deleted from survey {survey_id} successfully", result
        )

    @tool(
        "delete_all_responses",
        "Deletes all responses from a survey",
        read_only=False,
        destructive=True,
    )
    async def delete_all_responses(
        self,
        survey_id: SurveyId,
        confirm_deletion: ConfirmDeletion = False,
    ) -> ToolResponse:
        if confirm_deletion is not True:
            return ToolResponse.error("You must confirm deletion by setting confirm_deletion to true")
        try:
            result = await self.gateway.delete_all_responses(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error deleting responses", exc)
        return ToolResponse.ok(f"All responses from survey {survey_id} deleted successfully", result)

    @tool(
        "import_responses",
        "Imports responses from a base64 encoded file (CSV or other supported format)",
        read_only=False,
    )
    async def import_responses(
        self,
        survey_id: SurveyId,
        response_data: Annotated[str, Field(description="Base64 encoded file with responses")],
        import_data_type: Annotated[
            str, Field(description="Format of the import data (default: csv)")
        ] = "csv",
        full_response: Annotated[
            bool,
            Field(description="Whether to import as full responses (true) or match by key fields (false)"),
        ] = False,
    ) -> ToolResponse:
        try:
            result = await self.gateway.import_responses(
                survey_id, response_data, import_data_type, full_response
            )
        except Exception as exc:
            return ToolResponse.failure("Error importing responses", exc)
        return ToolResponse.ok(f"Responses imported successfully to survey {survey_id}", result)

    @tool(
        "set_response_status",
        "Sets the status of a specific response in a survey",
        read_only=False,
    )
    async def set_response_status(
        self,
        survey_id: SurveyId,
        response_id: ResponseId,
        status: Annotated[ResponseStatus, Field(description="The new status to set")],
    ) -> ToolResponse:
        try:
            result = await self.gateway.set_response_status(survey_id, response_id, status)
        except Exception as exc:
            return ToolResponse.failure("Error setting response status", exc)
        return ToolResponse.text(
            f'Status of response {response_id} in survey {survey_id} set to "{status}" successfully: {result}'
        )

    @tool(
        "reset_survey_responses",
        "Resets the response tables for a survey, removing all responses",
        read_only=False,
        destructive=True,
    )
    async def reset_survey_responses(
        self,
        survey_id: SurveyId,
        confirm_reset: Annotated[
            bool,
            Field(description="Confirmation that you want to reset all responses (must be true)"),
        ] = False,
    ) -> ToolResponse:
        if confirm_reset is not True:
            return ToolResponse.error("You must confirm reset by setting confirm_reset to true")
        try:
            result = await self.gateway.reset_survey_responses(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error resetting survey response tables", exc)
        return ToolResponse.ok(f"Response tables for survey {survey_id} reset successfully", result)
