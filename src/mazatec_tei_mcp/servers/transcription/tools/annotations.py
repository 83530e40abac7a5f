"""
Annotation tools for the transcription server.

Notes, variant forms, Kirk sets and their daughter words are sub-records of
an entry. Every tool here returns the full updated entry.
"""

from collections.abc import Callable
from typing import Any, Protocol

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from mazatec_tei_mcp.schemas.transcription.records import (
    NOTE_DELETE_SENTINEL,
    NoteType,
    TranscriptionEntry,
)
from mazatec_tei_mcp.servers.transcription.utils import records
from mazatec_tei_mcp.servers.transcription.utils.records import EntryNotFoundError
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession


class SessionGetter(Protocol):
    """Protocol for session getter function."""

    def __call__(self) -> TranscriptionSession: ...


def _non_empty(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def register_annotation_tools(  # noqa: C901, PLR0915
    mcp: FastMCP,
    get_session: SessionGetter,
) -> None:
    """Register note, variant and Kirk set tools on the given MCP server.

    Args:
        mcp: The FastMCP server instance to register tools on
        get_session: Function that returns the current TranscriptionSession
    """

    def _entry(entry_id: str) -> TranscriptionEntry:
        return records.require_entry(get_session().state, entry_id)

    def _checked(check: Callable[..., Any], *args: Any) -> Any:
        try:
            return check(*args)
        except EntryNotFoundError as e:
            raise ToolError(str(e)) from None

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    @mcp.tool
    async def add_note(
        entry_id: str,
        text: str,
        note_type: NoteType = NoteType.EDITORIAL,
        resp: str | None = None,
    ) -> TranscriptionEntry:
        """Attach a note to an entry.

        Note types: editorial (transcription decisions), linguistic
        (comparative/reconstructed), layout (physical arrangement),
        orthographic (spelling/graphemes), historical (contextual info),
        semantic (meaning clarifications).

        Args:
            entry_id: Entry ID from list_entries()
            text: Note text
            note_type: Note type
            resp: Responsibility code of the annotator (defaults to the configured code)

        Returns:
            The updated entry
        """
        _checked(_entry, entry_id)
        state = get_session().apply(records.add_note, entry_id, note_type, resp, text)
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def update_note(
        entry_id: str,
        note_id: str,
        text: str | None = None,
        note_type: str | None = None,
        resp: str | None = None,
    ) -> TranscriptionEntry:
        """Edit a note. Setting note_type to "none" deletes the note.

        Args:
            entry_id: Entry ID
            note_id: Note ID from get_entry()
            text: New text
            note_type: New type, or "none" to delete
            resp: New responsibility code

        Returns:
            The updated entry
        """
        entry = _checked(_entry, entry_id)
        _checked(records.require_note, entry, note_id)
        if note_type is not None and note_type != NOTE_DELETE_SENTINEL:
            try:
                NoteType(note_type)
            except ValueError:
                raise ToolError(f"Unknown note type '{note_type}'") from None

        updates = _non_empty(text=text, type=note_type, resp=resp)
        state = get_session().apply(records.update_note, entry_id, note_id, updates)
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def remove_note(entry_id: str, note_id: str) -> TranscriptionEntry:
        """Delete a note from an entry."""
        entry = _checked(_entry, entry_id)
        _checked(records.require_note, entry, note_id)
        state = get_session().apply(records.remove_note, entry_id, note_id)
        return records.require_entry(state, entry_id)

    # -------------------------------------------------------------------------
    # Variant form
    # -------------------------------------------------------------------------

    @mcp.tool
    async def set_variant(
        entry_id: str,
        abbr: str | None = None,
        maz_orig: str | None = None,
        maz_norm: str | None = None,
    ) -> TranscriptionEntry:
        """Create or edit the variant form (alternate spelling) of an entry.

        Args:
            entry_id: Entry ID
            abbr: Abbreviation label of the variant
            maz_orig: Variant in original orthography
            maz_norm: Variant in normalized orthography

        Returns:
            The updated entry
        """
        _checked(_entry, entry_id)
        updates = _non_empty(abbr=abbr, maz_orig=maz_orig, maz_norm=maz_norm)
        state = get_session().apply(records.set_variant, entry_id, updates)
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def clear_variant(entry_id: str) -> TranscriptionEntry:
        """Remove the variant form of an entry."""
        _checked(_entry, entry_id)
        state = get_session().apply(records.clear_variant, entry_id)
        return records.require_entry(state, entry_id)

    # -------------------------------------------------------------------------
    # Kirk sets
    # -------------------------------------------------------------------------

    @mcp.tool
    async def add_kirk_set(
        entry_id: str,
        set_number: str = "",
        source_page: str = "",
        headword: str = "",
    ) -> TranscriptionEntry:
        """Attach a Kirk set (reconstructed proto-form) to an entry.

        Args:
            entry_id: Entry ID
            set_number: Set number in the comparative source
            source_page: Page reference in the comparative source
            headword: Reconstructed headword

        Returns:
            The updated entry
        """
        _checked(_entry, entry_id)
        state = get_session().apply(
            records.add_kirk_set, entry_id, set_number, source_page, headword
        )
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def update_kirk_set(
        entry_id: str,
        kirk_set_id: str,
        set_number: str | None = None,
        source_page: str | None = None,
        headword: str | None = None,
    ) -> TranscriptionEntry:
        """Edit a Kirk set of an entry."""
        entry = _checked(_entry, entry_id)
        _checked(records.require_kirk_set, entry, kirk_set_id)
        updates = _non_empty(
            set_number=set_number, source_page=source_page, headword=headword
        )
        state = get_session().apply(
            records.update_kirk_set, entry_id, kirk_set_id, updates
        )
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def remove_kirk_set(entry_id: str, kirk_set_id: str) -> TranscriptionEntry:
        """Remove a Kirk set from an entry."""
        entry = _checked(_entry, entry_id)
        _checked(records.require_kirk_set, entry, kirk_set_id)
        state = get_session().apply(records.remove_kirk_set, entry_id, kirk_set_id)
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def add_daughter(
        entry_id: str,
        kirk_set_id: str,
        text: str,
        confirms: bool = False,
    ) -> TranscriptionEntry:
        """Add a daughter word to a Kirk set.

        Args:
            entry_id: Entry ID
            kirk_set_id: Kirk set ID from get_entry()
            text: Attested daughter-language form
            confirms: Whether the form confirms the reconstruction

        Returns:
            The updated entry
        """
        entry = _checked(_entry, entry_id)
        _checked(records.require_kirk_set, entry, kirk_set_id)
        state = get_session().apply(
            records.add_daughter, entry_id, kirk_set_id, text, confirms
        )
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def update_daughter(
        entry_id: str,
        kirk_set_id: str,
        daughter_id: str,
        text: str | None = None,
        confirms: bool | None = None,
    ) -> TranscriptionEntry:
        """Edit a daughter word of a Kirk set."""
        entry = _checked(_entry, entry_id)
        kirk_set = _checked(records.require_kirk_set, entry, kirk_set_id)
        _checked(records.require_daughter, kirk_set, daughter_id)
        updates = _non_empty(text=text, confirms=confirms)
        state = get_session().apply(
            records.update_daughter, entry_id, kirk_set_id, daughter_id, updates
        )
        return records.require_entry(state, entry_id)

    @mcp.tool
    async def remove_daughter(
        entry_id: str,
        kirk_set_id: str,
        daughter_id: str,
    ) -> TranscriptionEntry:
        """Remove a daughter word from a Kirk set."""
        entry = _checked(_entry, entry_id)
        kirk_set = _checked(records.require_kirk_set, entry, kirk_set_id)
        _checked(records.require_daughter, kirk_set, daughter_id)
        state = get_session().apply(
            records.remove_daughter, entry_id, kirk_set_id, daughter_id
        )
        return records.require_entry(state, entry_id)
