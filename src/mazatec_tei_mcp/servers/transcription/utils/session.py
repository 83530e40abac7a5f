"""Transcription session state management.

A session owns the current ``TranscriptionState``. Each user action runs a
pure record operation and replaces the state in one assignment, then
persists it. Imports are parsed before anything is replaced, so a failed
import leaves the session exactly as it was.
"""

from collections.abc import Callable
import logging
from typing import Concatenate, ParamSpec

from mazatec_tei_mcp.config.base import settings
from mazatec_tei_mcp.schemas.transcription.records import TranscriptionState
from mazatec_tei_mcp.servers.transcription.utils.export import ExportFormat, render
from mazatec_tei_mcp.servers.transcription.utils.records import reset_all
from mazatec_tei_mcp.servers.transcription.utils.storage import StateStore
from mazatec_tei_mcp.servers.transcription.utils.tei_reader import parse_tei

logger = logging.getLogger(__name__)

P = ParamSpec("P")


class TranscriptionSession:
    """Single-user editing session over one transcription."""

    def __init__(self, store: StateStore) -> None:
        """Initialize the session from the persisted state.

        Args:
            store: StateStore used to load and save the state
        """
        self.store = store
        self._state = store.load()

    @property
    def state(self) -> TranscriptionState:
        return self._state

    def _replace(self, state: TranscriptionState) -> TranscriptionState:
        self._state = state
        try:
            self.store.save(state)
        except OSError as e:
            logger.error(f"Failed to persist state to {self.store.path}: {e}")
        return state

    def apply(
        self,
        operation: Callable[Concatenate[TranscriptionState, P], TranscriptionState],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> TranscriptionState:
        """Run a record operation on the current state and keep its result.

        Example:
            >>> session.apply(add_entry)
            >>> session.apply(update_entry, entry_id, {"maz_orig": "Cham"})
        """
        return self._replace(operation(self._state, *args, **kwargs))

    def import_text(self, text: str) -> TranscriptionState:
        """Replace the whole state with an imported TEI document.

        Raises:
            ImportFailedError: If the document cannot be read; state is unchanged
        """
        state = parse_tei(text)
        logger.info(f"Replacing session state with {len(state.entries)} imported entries")
        return self._replace(state)

    def reset(self) -> TranscriptionState:
        """Replace metadata and entries with the defaults."""
        logger.info("Resetting transcription to defaults")
        return self._replace(reset_all())

    def render(self, fmt: ExportFormat = "tei") -> str:
        return render(self._state, fmt)


# Server state container (avoids global keyword)
class _ServerState:
    """Container for server state to avoid global mutable variables."""

    session: TranscriptionSession | None = None


_state = _ServerState()


def get_session() -> TranscriptionSession:
    """Get or create the process-wide transcription session."""
    if _state.session is None:
        store = StateStore(settings.state_path, settings.storage_key)
        _state.session = TranscriptionSession(store)
    return _state.session


def set_session(session: TranscriptionSession | None) -> None:
    """Install a session (or clear it so the next call recreates it)."""
    _state.session = session
