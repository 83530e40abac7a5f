"""Export of rendered documents to files."""

from collections.abc import Callable
import logging
from pathlib import Path
import re
from typing import Literal

from mazatec_tei_mcp.config.base import settings
from mazatec_tei_mcp.schemas.transcription.records import TranscriptionState
from mazatec_tei_mcp.servers.transcription.utils.flat_writer import render_flat
from mazatec_tei_mcp.servers.transcription.utils.tei_writer import render_tei

logger = logging.getLogger(__name__)

ExportFormat = Literal["tei", "flat"]

RENDERERS: dict[str, Callable[[TranscriptionState], str]] = {
    "tei": render_tei,
    "flat": render_flat,
}

EXTENSIONS: dict[str, str] = {"tei": "xml", "flat": "txt"}


def render(state: TranscriptionState, fmt: ExportFormat = "tei") -> str:
    """Render the state in the requested format.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(
            f"Unknown format '{fmt}', expected one of: {', '.join(RENDERERS)}"
        ) from None
    return renderer(state)


def _filename_part(value: str, fallback: str) -> str:
    part = re.sub(r"[^A-Za-z0-9._-]+", "_", value.strip()).strip("_")
    return part or fallback


def build_export_filename(state: TranscriptionState, extension: str = "xml") -> str:
    """Generate the download filename from the metadata.

    Composed of the author's surname, the export keyword, the year found in
    the origin date and the page of the first entry.

    Example:
        >>> build_export_filename(state)
        'Arrona_Mazatec_1830_000032278_0004.xml'
    """
    metadata = state.metadata
    names = metadata.author.split()
    surname = _filename_part(names[-1] if names else "", "Unknown")

    year_match = re.search(r"\d{4}", metadata.orig_date)
    year = year_match.group(0) if year_match else "undated"

    page = _filename_part(state.entries[0].page, "nopage")
    keyword = _filename_part(settings.export_keyword, "transcription")
    return f"{surname}_{keyword}_{year}_{page}.{extension}"


def write_export(
    state: TranscriptionState,
    directory: Path,
    fmt: ExportFormat = "tei",
) -> Path:
    """Render and write the document, returning the written path."""
    content = render(state, fmt)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / build_export_filename(state, EXTENSIONS[fmt])
    path.write_text(content, encoding="utf-8")
    logger.info(f"Exported {len(state.entries)} entries to {path}")
    return path
