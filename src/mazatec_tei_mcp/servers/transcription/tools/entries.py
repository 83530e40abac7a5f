"""
Entry tools for the transcription server.

This module provides tools for listing, adding, editing, duplicating and
removing transcription entries (one entry per manuscript line).
"""

from typing import Any, Protocol

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from pydantic import ValidationError

from mazatec_tei_mcp.schemas.transcription.records import Layout, TranscriptionEntry
from mazatec_tei_mcp.schemas.transcription.responses import EntrySummary
from mazatec_tei_mcp.servers.transcription.utils import records
from mazatec_tei_mcp.servers.transcription.utils.records import EntryNotFoundError
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession


class SessionGetter(Protocol):
    """Protocol for session getter function."""

    def __call__(self) -> TranscriptionSession: ...


def register_entry_tools(  # noqa: C901
    mcp: FastMCP,
    get_session: SessionGetter,
) -> None:
    """Register entry tools on the given MCP server.

    Args:
        mcp: The FastMCP server instance to register tools on
        get_session: Function that returns the current TranscriptionSession
    """

    def _require(session: TranscriptionSession, entry_id: str) -> TranscriptionEntry:
        try:
            return records.require_entry(session.state, entry_id)
        except EntryNotFoundError as e:
            raise ToolError(str(e)) from None

    @mcp.tool
    async def list_entries(
        page: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[EntrySummary]:
        """List entries in document order.

        PURPOSE: Overview of the transcription and lookup of entry IDs.

        WHEN TO USE:
        - Before editing → get the entry_id to address
        - To check which lines of a page are already transcribed

        Args:
            page: Only list entries of this page (optional)
            limit: Maximum number of entries to return
            offset: Number of entries to skip

        Returns:
            List of entry summaries with their IDs and positions
        """
        summaries = [
            EntrySummary.from_entry(entry, position)
            for position, entry in enumerate(get_session().state.entries, start=1)
            if page is None or entry.page == page
        ]
        return summaries[offset : offset + limit]

    @mcp.tool
    async def get_entry(entry_id: str) -> TranscriptionEntry:
        """Get one entry with all fields, notes, variant and Kirk sets.

        Args:
            entry_id: Entry ID from list_entries()

        Returns:
            The complete entry
        """
        return _require(get_session(), entry_id)

    @mcp.tool
    async def add_entry(
        after_entry_id: str | None = None,
        ctx: Context | None = None,
    ) -> TranscriptionEntry:
        """Append a new entry at the end of the transcription.

        The new entry continues from the last entry (or from after_entry_id if
        given): same page and column, line number advanced by one.

        Args:
            after_entry_id: Entry to continue from (optional)
            ctx: FastMCP Context

        Returns:
            The new entry
        """
        session = get_session()
        state = session.apply(records.add_entry, after_entry_id)
        entry = state.entries[-1]
        if ctx:
            await ctx.info(f"Added entry {entry.id} (page {entry.page}, line {entry.line})")
        return entry

    @mcp.tool
    async def update_entry(  # noqa: PLR0913
        entry_id: str,
        page: str | None = None,
        column: Layout | None = None,
        line: str | None = None,
        maz_orig: str | None = None,
        maz_norm: str | None = None,
        uncertain_maz: bool | None = None,
        spa_orig: str | None = None,
        spa_norm: str | None = None,
        uncertain_spa: bool | None = None,
        eng_gloss: str | None = None,
        uncertain_eng: bool | None = None,
        ipa: str | None = None,
        kirk_set: str | None = None,
    ) -> TranscriptionEntry:
        """Update fields of an entry. Omitted fields stay unchanged.

        PURPOSE: Transcribe a manuscript line.

        Args:
            entry_id: Entry ID from list_entries()
            page: Page/folio identifier
            column: "1", "2" or "across"
            line: Line number (dotted decimal, e.g. "3.1")
            maz_orig: Mazatec in original orthography
            maz_norm: Mazatec in normalized orthography
            uncertain_maz: Mark the original Mazatec reading as uncertain
            spa_orig: Spanish gloss as written
            spa_norm: Spanish gloss normalized
            uncertain_spa: Mark the original Spanish reading as uncertain
            eng_gloss: English gloss
            uncertain_eng: Mark the English gloss as uncertain
            ipa: IPA transcription
            kirk_set: Free-text Kirk set identifier

        Returns:
            The updated entry
        """
        session = get_session()
        _require(session, entry_id)

        updates: dict[str, Any] = {
            key: value
            for key, value in {
                "page": page,
                "column": column,
                "line": line,
                "maz_orig": maz_orig,
                "maz_norm": maz_norm,
                "uncertain_maz": uncertain_maz,
                "spa_orig": spa_orig,
                "spa_norm": spa_norm,
                "uncertain_spa": uncertain_spa,
                "eng_gloss": eng_gloss,
                "uncertain_eng": uncertain_eng,
                "ipa": ipa,
                "kirk_set": kirk_set,
            }.items()
            if value is not None
        }
        try:
            state = session.apply(records.update_entry, entry_id, updates)
        except ValidationError as e:
            raise ToolError(f"Invalid entry values: {e}") from e
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def remove_entry(entry_id: str) -> dict[str, Any]:
        """Remove an entry. The last remaining entry cannot be removed.

        Args:
            entry_id: Entry ID from list_entries()

        Returns:
            Dict with 'removed' (bool) and the remaining 'entry_count'
        """
        session = get_session()
        _require(session, entry_id)
        before = len(session.state.entries)
        state = session.apply(records.remove_entry, entry_id)
        return {"removed": len(state.entries) < before, "entry_count": len(state.entries)}

    @mcp.tool
    async def duplicate_entry(entry_id: str) -> TranscriptionEntry:
        """Insert a copy of an entry directly after it.

        Notes, variant and Kirk sets are copied too. The copy's line number is
        advanced by 0.1.

        Args:
            entry_id: Entry ID from list_entries()

        Returns:
            The new copy
        """
        session = get_session()
        _require(session, entry_id)
        state = session.apply(records.duplicate_entry, entry_id)
        index = next(i for i, e in enumerate(state.entries) if e.id == entry_id)
        return state.entries[index + 1]
