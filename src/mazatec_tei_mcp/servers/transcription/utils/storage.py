"""Persistence of the transcription state as a single JSON blob.

The blob lives under a versioned key (``settings.storage_key``). It is read
once when a session starts and rewritten after every change. Missing,
corrupt or foreign blobs never surface as errors: the store logs them and
hands back the default state.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from mazatec_tei_mcp.schemas.transcription.records import TranscriptionState
from mazatec_tei_mcp.servers.transcription.utils.records import default_state

logger = logging.getLogger(__name__)


class StateStore:
    """Key-value style store for one transcription state.

    Example:
        ```python
        store = StateStore(settings.state_path, settings.storage_key)
        state = store.load()
        store.save(state)
        ```
    """

    def __init__(self, path: Path, key: str) -> None:
        """Initialize the store.

        Args:
            path: JSON file holding the blob
            key: Versioned key the blob must carry
        """
        self.path = path
        self.key = key

    def load(self) -> TranscriptionState:
        """Read the persisted state, or the default state if there is none."""
        if not self.path.exists():
            logger.info(f"No saved state at {self.path}, starting fresh")
            return default_state()

        try:
            blob = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load saved state: {e}. Using defaults.")
            return default_state()

        if not isinstance(blob, dict) or blob.get("key") != self.key:
            logger.warning(
                f"Saved state at {self.path} is not under key '{self.key}'. Using defaults."
            )
            return default_state()

        try:
            state = TranscriptionState.model_validate(blob.get("state"))
        except ValidationError as e:
            logger.warning(f"Saved state is invalid: {e}. Using defaults.")
            return default_state()

        logger.info(f"Loaded {len(state.entries)} entries from {self.path}")
        return state

    def save(self, state: TranscriptionState) -> None:
        """Write the state. The previous blob is replaced in one rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(
            {"key": self.key, "state": state.model_dump(mode="json")},
            ensure_ascii=False,
            indent=2,
        )
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(self.path)
