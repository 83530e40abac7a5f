"""
Transcription MCP resources.

Live views of the current transcription that can be attached as context.
"""

from typing import Protocol

from fastmcp import FastMCP

from mazatec_tei_mcp.schemas.transcription.records import (
    NOTE_DELETE_SENTINEL,
    NOTE_TYPE_DESCRIPTIONS,
)
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession


class SessionGetter(Protocol):
    """Protocol for session getter function."""

    def __call__(self) -> TranscriptionSession: ...


def register_transcription_resources(
    mcp: FastMCP,
    get_session: SessionGetter,
) -> None:
    """Register transcription resources on the given MCP server.

    Args:
        mcp: The FastMCP server instance to register resources on
        get_session: Function that returns the current TranscriptionSession
    """

    @mcp.resource("transcription://document.tei", mime_type="application/xml")
    def get_tei_document() -> str:
        """The current transcription as a TEI P5 document."""
        return get_session().render("tei")

    @mcp.resource("transcription://document.flat", mime_type="text/plain")
    def get_flat_document() -> str:
        """The current transcription in the flat tag format."""
        return get_session().render("flat")

    @mcp.resource("transcription://note-types")
    def get_note_types() -> str:
        """Note vocabulary with descriptions."""
        lines = ["# Note types", ""]
        lines.extend(
            f"- **{note_type.value}**: {description}"
            for note_type, description in NOTE_TYPE_DESCRIPTIONS.items()
        )
        lines.append("")
        lines.append(
            f'Setting a note\'s type to "{NOTE_DELETE_SENTINEL}" deletes the note.'
        )
        return "\n".join(lines)
