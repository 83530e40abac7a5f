"""Tests for the editing session."""

import logging

import pytest

from mazatec_tei_mcp.schemas.transcription.records import TranscriptionState
from mazatec_tei_mcp.servers.transcription.utils.records import add_entry, update_entry
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession
from mazatec_tei_mcp.servers.transcription.utils.storage import StateStore
from mazatec_tei_mcp.servers.transcription.utils.tei_reader import ImportFailedError
from mazatec_tei_mcp.servers.transcription.utils.tei_writer import render_tei

from conftest import content


def test_apply_replaces_and_persists(session: TranscriptionSession) -> None:
    entry_id = session.state.entries[0].id
    session.apply(update_entry, entry_id, {"maz_orig": "Cham"})
    session.apply(add_entry)

    assert session.state.entries[0].maz_orig == "Cham"
    assert len(session.state.entries) == 2

    reopened = TranscriptionSession(session.store)
    assert reopened.state == session.state


def test_failed_import_leaves_state_untouched(
    session: TranscriptionSession, sample_state: TranscriptionState
) -> None:
    session.import_text(render_tei(sample_state))
    before = session.state

    with pytest.raises(ImportFailedError):
        session.import_text("not a document")

    assert session.state is before
    assert TranscriptionSession(session.store).state == before


def test_import_replaces_state(
    session: TranscriptionSession, sample_state: TranscriptionState
) -> None:
    session.import_text(render_tei(sample_state))
    assert content(session.state) == content(sample_state)


def test_reset_restores_defaults(
    session: TranscriptionSession, sample_state: TranscriptionState
) -> None:
    session.import_text(render_tei(sample_state))
    session.reset()

    assert len(session.state.entries) == 1
    assert session.state.metadata.editor == ""
    assert len(TranscriptionSession(session.store).state.entries) == 1


def test_save_failure_keeps_new_state(
    store: StateStore,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    session = TranscriptionSession(store)

    def fail(state: TranscriptionState) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(store, "save", fail)
    with caplog.at_level(logging.ERROR):
        session.apply(add_entry)

    assert len(session.state.entries) == 2
    assert "disk full" in caplog.text


def test_render_formats(session: TranscriptionSession) -> None:
    assert session.render("tei").startswith("<?xml")
    assert session.render("flat").startswith("<encodingDesc>")
    with pytest.raises(ValueError):
        session.render("pdf")  # type: ignore[arg-type]
