"""Tests for the MCP tool layer, called through an in-memory client."""

import asyncio
from pathlib import Path
from typing import Any

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from mazatec_tei_mcp.schemas.transcription.records import Layout, TranscriptionState
from mazatec_tei_mcp.servers.transcription.server import mcp
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession
from mazatec_tei_mcp.servers.transcription.utils.tei_writer import render_tei


def _call(name: str, arguments: dict[str, Any] | None = None) -> Any:
    async def run() -> Any:
        async with Client(mcp) as client:
            return await client.call_tool(name, arguments or {})

    return asyncio.run(run())


def _read(uri: str) -> str:
    async def run() -> str:
        async with Client(mcp) as client:
            contents = await client.read_resource(uri)
            return contents[0].text

    return asyncio.run(run())


def test_add_and_update_entry(session: TranscriptionSession) -> None:
    _call("add_entry")
    new = session.state.entries[-1]
    assert new.line == "2.1"

    _call(
        "update_entry",
        {"entry_id": new.id, "maz_orig": "Cham", "column": "2", "uncertain_maz": True},
    )

    entry = session.state.entries[-1]
    assert entry.maz_orig == "Cham"
    assert entry.column == Layout.COLUMN_2
    assert entry.uncertain_maz is True
    assert entry.line == "2.1"


def test_unknown_entry_raises_tool_error(session: TranscriptionSession) -> None:
    with pytest.raises(ToolError):
        _call("get_entry", {"entry_id": "missing"})


def test_last_entry_is_not_removed(session: TranscriptionSession) -> None:
    entry_id = session.state.entries[0].id
    _call("remove_entry", {"entry_id": entry_id})
    assert [e.id for e in session.state.entries] == [entry_id]


def test_duplicate_entry(session: TranscriptionSession) -> None:
    source = session.state.entries[0]
    _call("duplicate_entry", {"entry_id": source.id})

    assert len(session.state.entries) == 2
    assert session.state.entries[1].line == "1.2"


def test_update_metadata(session: TranscriptionSession) -> None:
    _call("update_metadata", {"field": "editor", "value": "A. Editor"})
    assert session.state.metadata.editor == "A. Editor"

    with pytest.raises(ToolError):
        _call("update_metadata", {"field": "genre", "value": "x"})


def test_note_lifecycle(session: TranscriptionSession) -> None:
    entry_id = session.state.entries[0].id
    _call("add_note", {"entry_id": entry_id, "text": "Faded", "note_type": "layout"})

    note = session.state.entries[0].notes[0]
    assert note.resp == "IK"

    with pytest.raises(ToolError):
        _call("update_note", {"entry_id": entry_id, "note_id": note.id, "note_type": "bogus"})

    _call("update_note", {"entry_id": entry_id, "note_id": note.id, "note_type": "none"})
    assert session.state.entries[0].notes == []


def test_kirk_set_tools(session: TranscriptionSession) -> None:
    entry_id = session.state.entries[0].id
    _call("add_kirk_set", {"entry_id": entry_id, "set_number": "12", "headword": "*ʃa"})
    kirk_set = session.state.entries[0].kirk_sets[0]

    _call(
        "add_daughter",
        {"entry_id": entry_id, "kirk_set_id": kirk_set.id, "text": "ʃa", "confirms": True},
    )
    assert session.state.entries[0].kirk_sets[0].daughters[0].confirms is True

    with pytest.raises(ToolError):
        _call("remove_kirk_set", {"entry_id": entry_id, "kirk_set_id": "missing"})


def test_failed_import_leaves_state_untouched(session: TranscriptionSession) -> None:
    before = session.state
    with pytest.raises(ToolError, match="Import failed"):
        _call("import_document", {"xml": "not xml"})
    assert session.state is before


def test_import_document(
    session: TranscriptionSession, sample_state: TranscriptionState
) -> None:
    _call("import_document", {"xml": render_tei(sample_state)})
    assert len(session.state.entries) == len(sample_state.entries)
    assert session.state.metadata == sample_state.metadata


def test_reset_requires_confirmation(
    session: TranscriptionSession, sample_state: TranscriptionState
) -> None:
    session.import_text(render_tei(sample_state))

    with pytest.raises(ToolError):
        _call("reset_document")
    assert len(session.state.entries) == len(sample_state.entries)

    _call("reset_document", {"confirm": True})
    assert len(session.state.entries) == 1


def test_export_document(tmp_path: Path, session: TranscriptionSession) -> None:
    _call("export_document", {"fmt": "tei", "directory": str(tmp_path)})
    assert (tmp_path / "Arrona_Mazatec_1830_000032278_0004.xml").exists()


def test_document_resources(session: TranscriptionSession) -> None:
    assert _read("transcription://document.tei").startswith("<?xml")
    assert "<old_maz>" in _read("transcription://document.flat")
    assert "orthographic" in _read("transcription://note-types")
