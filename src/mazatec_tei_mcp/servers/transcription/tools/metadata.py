"""Metadata tools for the transcription server."""

from typing import Protocol

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError

from mazatec_tei_mcp.schemas.transcription.records import Metadata
from mazatec_tei_mcp.servers.transcription.utils.records import (
    UnknownFieldError,
    update_metadata_field,
)
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession


class SessionGetter(Protocol):
    """Protocol for session getter function."""

    def __call__(self) -> TranscriptionSession: ...


def register_metadata_tools(mcp: FastMCP, get_session: SessionGetter) -> None:
    """Register metadata tools on the given MCP server.

    Args:
        mcp: The FastMCP server instance to register tools on
        get_session: Function that returns the current TranscriptionSession
    """

    @mcp.tool
    async def get_metadata() -> Metadata:
        """Get the document metadata (titles, archive identifiers, physical description).

        Returns:
            All metadata fields with their current values
        """
        return get_session().state.metadata

    @mcp.tool
    async def update_metadata(
        field: str,
        value: str,
        ctx: Context | None = None,
    ) -> Metadata:
        """Set one metadata field.

        PURPOSE: Fill in the TEI header of the transcription.

        Available fields: title, alt_title, author, editor, affiliation,
        publisher, date, settlement, institution, repository, shelfmark,
        collection, ms_contents_title, ms_contents_note, summary, main_lang,
        other_langs, phys_form, phys_extent, phys_layout, hand_note,
        orig_date, orig_place, project_desc

        Args:
            field: Metadata field name
            value: New value (empty string clears the field)
            ctx: FastMCP Context

        Returns:
            Updated metadata
        """
        session = get_session()
        try:
            state = session.apply(update_metadata_field, field, value)
        except UnknownFieldError as e:
            raise ToolError(str(e)) from e

        if ctx:
            await ctx.info(f"Metadata field '{field}' updated")
        return state.metadata
