"""Pure update operations over the transcription record model.

Every function takes a ``TranscriptionState`` and returns a new one. The
input state is never modified, so a caller can replace its current state
with the result in a single assignment.

Guarded mutations (removing the last entry, addressing an unknown id) are
refused silently and return the input state unchanged.
"""

from collections.abc import Callable, Mapping
from decimal import ROUND_HALF_UP, Decimal
import logging
import re
from typing import Any, TypeVar

from pydantic import BaseModel

from mazatec_tei_mcp.config.base import settings
from mazatec_tei_mcp.schemas.transcription.records import (
    NOTE_DELETE_SENTINEL,
    DaughterWord,
    KirkSet,
    Metadata,
    Note,
    NoteType,
    TranscriptionEntry,
    TranscriptionState,
    VariantForm,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

# Leading decimal number, read the way a form's parseFloat() reads it
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")
_ONE_DECIMAL = Decimal("0.1")


class TranscriptionError(Exception):
    """Base exception for transcription errors."""

    pass


class UnknownFieldError(TranscriptionError, ValueError):
    """Metadata or entry field does not exist."""

    pass


class EntryNotFoundError(TranscriptionError):
    """No entry (or sub-record) with the given id."""

    pass


# =============================================================================
# Construction
# =============================================================================


def increment_line(line: str, step: Decimal) -> str | None:
    """Add ``step`` to the numeric prefix of a line number.

    Args:
        line: Line number such as "1.1" or "12"
        step: Increment, e.g. Decimal("1") or Decimal("0.1")

    Returns:
        New line number with one decimal place, or None if ``line`` has no
        numeric prefix

    Example:
        >>> increment_line("1.1", Decimal("1"))
        '2.1'
        >>> increment_line("3.1", Decimal("0.1"))
        '3.2'
    """
    match = _LEADING_NUMBER.match(line or "")
    if match is None:
        return None
    value = Decimal(match.group(1)) + step
    return str(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def create_entry(previous: TranscriptionEntry | None = None) -> TranscriptionEntry:
    """Create a fresh entry, continuing from ``previous`` when given.

    The page and column are carried over from the previous entry and the line
    number is advanced by ``settings.line_step``.
    """
    if previous is None:
        return TranscriptionEntry(page=settings.default_page, line=settings.default_line)

    line = increment_line(previous.line, settings.line_step) or settings.default_line
    return TranscriptionEntry(page=previous.page, column=previous.column, line=line)


def default_state() -> TranscriptionState:
    """Default metadata with a single fresh entry."""
    return TranscriptionState(metadata=Metadata(), entries=[create_entry()])


def reset_all() -> TranscriptionState:
    """Replace everything with the default state."""
    return default_state()


def _strip_ids(data: Any) -> Any:
    """Drop every ``id`` key so that validation assigns fresh identifiers."""
    if isinstance(data, dict):
        return {k: _strip_ids(v) for k, v in data.items() if k != "id"}
    if isinstance(data, list):
        return [_strip_ids(item) for item in data]
    return data


def _merge(record: RecordT, updates: Mapping[str, Any]) -> RecordT:
    """Merge ``updates`` into ``record`` and re-validate. The id is preserved."""
    unknown = set(updates) - set(type(record).model_fields)
    if unknown:
        raise UnknownFieldError(
            f"Unknown field(s) for {type(record).__name__}: {', '.join(sorted(unknown))}"
        )
    data = record.model_dump()
    data.update({k: v for k, v in updates.items() if k != "id"})
    return type(record).model_validate(data)


# =============================================================================
# Metadata
# =============================================================================


def update_metadata_field(
    state: TranscriptionState, field: str, value: str
) -> TranscriptionState:
    """Set one metadata field."""
    if field not in Metadata.model_fields:
        raise UnknownFieldError(f"Unknown metadata field: {field}")
    metadata = _merge(state.metadata, {field: value})
    return state.model_copy(update={"metadata": metadata})


# =============================================================================
# Entries
# =============================================================================


def find_entry(state: TranscriptionState, entry_id: str) -> TranscriptionEntry | None:
    return next((e for e in state.entries if e.id == entry_id), None)


def require_entry(state: TranscriptionState, entry_id: str) -> TranscriptionEntry:
    """Entry with ``entry_id``.

    Raises:
        EntryNotFoundError: If no such entry exists
    """
    entry = find_entry(state, entry_id)
    if entry is None:
        raise EntryNotFoundError(f"Entry '{entry_id}' not found")
    return entry


def require_note(entry: TranscriptionEntry, note_id: str) -> Note:
    note = next((n for n in entry.notes if n.id == note_id), None)
    if note is None:
        raise EntryNotFoundError(f"Note '{note_id}' not found in entry '{entry.id}'")
    return note


def require_kirk_set(entry: TranscriptionEntry, kirk_set_id: str) -> KirkSet:
    kirk_set = next((k for k in entry.kirk_sets if k.id == kirk_set_id), None)
    if kirk_set is None:
        raise EntryNotFoundError(
            f"Kirk set '{kirk_set_id}' not found in entry '{entry.id}'"
        )
    return kirk_set


def require_daughter(kirk_set: KirkSet, daughter_id: str) -> DaughterWord:
    daughter = next((d for d in kirk_set.daughters if d.id == daughter_id), None)
    if daughter is None:
        raise EntryNotFoundError(
            f"Daughter word '{daughter_id}' not found in Kirk set '{kirk_set.id}'"
        )
    return daughter


def _index_of(state: TranscriptionState, entry_id: str) -> int | None:
    return next(
        (i for i, e in enumerate(state.entries) if e.id == entry_id), None
    )


def _with_entries(
    state: TranscriptionState, entries: list[TranscriptionEntry]
) -> TranscriptionState:
    return state.model_copy(update={"entries": entries})


def _map_entry(
    state: TranscriptionState,
    entry_id: str,
    change: Callable[[TranscriptionEntry], TranscriptionEntry],
) -> TranscriptionState:
    index = _index_of(state, entry_id)
    if index is None:
        logger.debug(f"Entry {entry_id} not found, state unchanged")
        return state
    entries = list(state.entries)
    entries[index] = change(entries[index])
    return _with_entries(state, entries)


def update_entry(
    state: TranscriptionState, entry_id: str, updates: Mapping[str, Any]
) -> TranscriptionState:
    """Merge partial fields into the entry with ``entry_id``."""
    return _map_entry(state, entry_id, lambda entry: _merge(entry, updates))


def add_entry(
    state: TranscriptionState, after_id: str | None = None
) -> TranscriptionState:
    """Append a new entry at the end of the list.

    Defaults are derived from the entry ``after_id`` if given (and present),
    otherwise from the last entry.
    """
    template = find_entry(state, after_id) if after_id else None
    if template is None:
        template = state.entries[-1]
    return _with_entries(state, [*state.entries, create_entry(template)])


def remove_entry(state: TranscriptionState, entry_id: str) -> TranscriptionState:
    """Remove an entry. The last remaining entry is never removed."""
    if len(state.entries) <= 1:
        logger.debug("Refusing to remove the only entry")
        return state
    entries = [e for e in state.entries if e.id != entry_id]
    if len(entries) == len(state.entries):
        return state
    return _with_entries(state, entries)


def duplicate_entry(state: TranscriptionState, entry_id: str) -> TranscriptionState:
    """Insert a copy of an entry right after it.

    The copy (and all of its notes, variant, Kirk sets and daughter words)
    gets fresh identifiers and the line number advances by
    ``settings.duplicate_line_step``.
    """
    index = _index_of(state, entry_id)
    if index is None:
        return state

    source = state.entries[index]
    data = _strip_ids(source.model_dump())
    data["line"] = (
        increment_line(source.line, settings.duplicate_line_step) or source.line
    )
    copy = TranscriptionEntry.model_validate(data)

    entries = list(state.entries)
    entries.insert(index + 1, copy)
    return _with_entries(state, entries)


# =============================================================================
# Notes
# =============================================================================


def add_note(
    state: TranscriptionState,
    entry_id: str,
    note_type: NoteType | str = NoteType.EDITORIAL,
    resp: str | None = None,
    text: str = "",
) -> TranscriptionState:
    note = Note(
        type=NoteType(note_type),
        resp=settings.default_resp if resp is None else resp,
        text=text,
    )
    return _map_entry(
        state,
        entry_id,
        lambda entry: entry.model_copy(update={"notes": [*entry.notes, note]}),
    )


def remove_note(
    state: TranscriptionState, entry_id: str, note_id: str
) -> TranscriptionState:
    return _map_entry(
        state,
        entry_id,
        lambda entry: entry.model_copy(
            update={"notes": [n for n in entry.notes if n.id != note_id]}
        ),
    )


def update_note(
    state: TranscriptionState,
    entry_id: str,
    note_id: str,
    updates: Mapping[str, Any],
) -> TranscriptionState:
    """Update a note. Setting its type to "none" removes it."""
    if updates.get("type") == NOTE_DELETE_SENTINEL:
        return remove_note(state, entry_id, note_id)

    def change(entry: TranscriptionEntry) -> TranscriptionEntry:
        notes = [_merge(n, updates) if n.id == note_id else n for n in entry.notes]
        return entry.model_copy(update={"notes": notes})

    return _map_entry(state, entry_id, change)


# =============================================================================
# Variant form
# =============================================================================


def set_variant(
    state: TranscriptionState, entry_id: str, updates: Mapping[str, Any]
) -> TranscriptionState:
    """Create or update the entry's variant form. An emptied variant is removed."""

    def change(entry: TranscriptionEntry) -> TranscriptionEntry:
        variant = _merge(entry.variant or VariantForm(), updates)
        return entry.model_copy(
            update={"variant": None if variant.is_empty else variant}
        )

    return _map_entry(state, entry_id, change)


def clear_variant(state: TranscriptionState, entry_id: str) -> TranscriptionState:
    return _map_entry(
        state, entry_id, lambda entry: entry.model_copy(update={"variant": None})
    )


# =============================================================================
# Kirk sets and daughter words
# =============================================================================


def add_kirk_set(
    state: TranscriptionState,
    entry_id: str,
    set_number: str = "",
    source_page: str = "",
    headword: str = "",
) -> TranscriptionState:
    kirk_set = KirkSet(set_number=set_number, source_page=source_page, headword=headword)
    return _map_entry(
        state,
        entry_id,
        lambda entry: entry.model_copy(
            update={"kirk_sets": [*entry.kirk_sets, kirk_set]}
        ),
    )


def _map_kirk_set(
    state: TranscriptionState,
    entry_id: str,
    kirk_set_id: str,
    change: Callable[[KirkSet], KirkSet],
) -> TranscriptionState:
    def change_entry(entry: TranscriptionEntry) -> TranscriptionEntry:
        kirk_sets = [change(k) if k.id == kirk_set_id else k for k in entry.kirk_sets]
        return entry.model_copy(update={"kirk_sets": kirk_sets})

    return _map_entry(state, entry_id, change_entry)


def update_kirk_set(
    state: TranscriptionState,
    entry_id: str,
    kirk_set_id: str,
    updates: Mapping[str, Any],
) -> TranscriptionState:
    return _map_kirk_set(
        state, entry_id, kirk_set_id, lambda kirk_set: _merge(kirk_set, updates)
    )


def remove_kirk_set(
    state: TranscriptionState, entry_id: str, kirk_set_id: str
) -> TranscriptionState:
    return _map_entry(
        state,
        entry_id,
        lambda entry: entry.model_copy(
            update={"kirk_sets": [k for k in entry.kirk_sets if k.id != kirk_set_id]}
        ),
    )


def add_daughter(
    state: TranscriptionState,
    entry_id: str,
    kirk_set_id: str,
    text: str = "",
    confirms: bool = False,
) -> TranscriptionState:
    daughter = DaughterWord(text=text, confirms=confirms)
    return _map_kirk_set(
        state,
        entry_id,
        kirk_set_id,
        lambda kirk_set: kirk_set.model_copy(
            update={"daughters": [*kirk_set.daughters, daughter]}
        ),
    )


def update_daughter(
    state: TranscriptionState,
    entry_id: str,
    kirk_set_id: str,
    daughter_id: str,
    updates: Mapping[str, Any],
) -> TranscriptionState:
    def change(kirk_set: KirkSet) -> KirkSet:
        daughters = [
            _merge(d, updates) if d.id == daughter_id else d for d in kirk_set.daughters
        ]
        return kirk_set.model_copy(update={"daughters": daughters})

    return _map_kirk_set(state, entry_id, kirk_set_id, change)


def remove_daughter(
    state: TranscriptionState,
    entry_id: str,
    kirk_set_id: str,
    daughter_id: str,
) -> TranscriptionState:
    return _map_kirk_set(
        state,
        entry_id,
        kirk_set_id,
        lambda kirk_set: kirk_set.model_copy(
            update={"daughters": [d for d in kirk_set.daughters if d.id != daughter_id]}
        ),
    )
