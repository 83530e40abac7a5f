"""
Document tools for the transcription server.

This module provides tools for rendering the transcription, exporting it to
a file, importing a previously exported TEI document and resetting the
whole transcription.
"""

import logging
from pathlib import Path
from typing import Protocol

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError

from mazatec_tei_mcp.config.base import settings
from mazatec_tei_mcp.schemas.transcription.responses import (
    DocumentStatus,
    EntrySummary,
    ExportResult,
    ImportResult,
)
from mazatec_tei_mcp.servers.transcription.utils.export import (
    ExportFormat,
    build_export_filename,
    write_export,
)
from mazatec_tei_mcp.servers.transcription.utils.session import TranscriptionSession
from mazatec_tei_mcp.servers.transcription.utils.tei_reader import ImportFailedError

logger = logging.getLogger(__name__)

IMPORT_FAILED_MESSAGE = "Import failed: document could not be read"


class SessionGetter(Protocol):
    """Protocol for session getter function."""

    def __call__(self) -> TranscriptionSession: ...


def _import_result(session: TranscriptionSession) -> ImportResult:
    state = session.state
    return ImportResult(
        title=state.metadata.title,
        entry_count=len(state.entries),
        entries=[
            EntrySummary.from_entry(entry, position)
            for position, entry in enumerate(state.entries, start=1)
        ],
    )


def register_document_tools(
    mcp: FastMCP,
    get_session: SessionGetter,
) -> None:
    """Register document tools on the given MCP server.

    Args:
        mcp: The FastMCP server instance to register tools on
        get_session: Function that returns the current TranscriptionSession
    """

    @mcp.tool
    async def render_document(fmt: ExportFormat = "tei") -> str:
        """Render the current transcription.

        PURPOSE: Live preview of the markup, or text to copy elsewhere.

        Args:
            fmt: "tei" for the TEI P5 document, "flat" for the flat tag format

        Returns:
            The rendered document
        """
        return get_session().render(fmt)

    @mcp.tool
    async def export_document(
        fmt: ExportFormat = "tei",
        directory: str | None = None,
        ctx: Context | None = None,
    ) -> ExportResult:
        """Write the rendered transcription to a file.

        The filename is built from the author's surname, a keyword, the year
        of the origin date and the first page, e.g.
        Arrona_Mazatec_1830_000032278_0004.xml

        Args:
            fmt: "tei" or "flat"
            directory: Target directory (defaults to the configured export directory)
            ctx: FastMCP Context

        Returns:
            Path and size of the written file
        """
        session = get_session()
        target = Path(directory).expanduser() if directory else settings.export_dir
        try:
            path = write_export(session.state, target, fmt)
        except OSError as e:
            raise ToolError(f"Export failed: {e}") from e

        if ctx:
            await ctx.info(f"Exported to {path}")
        return ExportResult(
            path=str(path),
            format=fmt,
            entry_count=len(session.state.entries),
            size_bytes=path.stat().st_size,
        )

    @mcp.tool
    async def import_document(
        xml: str,
        ctx: Context | None = None,
    ) -> ImportResult:
        """Replace the whole transcription with a TEI document.

        PURPOSE: Continue working on a previously exported transcription.

        WARNING: Metadata and all entries are replaced. If the document cannot
        be read, nothing changes.

        Args:
            xml: TEI document text (as produced by render_document / export_document)
            ctx: FastMCP Context

        Returns:
            Summary of the imported transcription
        """
        session = get_session()
        try:
            session.import_text(xml)
        except ImportFailedError as e:
            logger.warning(f"Import rejected: {e}")
            raise ToolError(IMPORT_FAILED_MESSAGE) from e

        if ctx:
            await ctx.info(f"Imported {len(session.state.entries)} entries")
        return _import_result(session)

    @mcp.tool
    async def import_file(path: str) -> ImportResult:
        """Replace the whole transcription with a TEI file from disk.

        Args:
            path: Path to the TEI file

        Returns:
            Summary of the imported transcription
        """
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ToolError(f"File '{path}' not found") from None
        except (OSError, UnicodeDecodeError) as e:
            raise ToolError(f"Could not read '{path}': {e}") from e

        session = get_session()
        try:
            session.import_text(text)
        except ImportFailedError as e:
            logger.warning(f"Import of {file_path} rejected: {e}")
            raise ToolError(IMPORT_FAILED_MESSAGE) from e
        return _import_result(session)

    @mcp.tool
    async def reset_document(confirm: bool = False) -> DocumentStatus:
        """Clear all data: default metadata and a single empty entry.

        WARNING: This cannot be undone. Pass confirm=True to proceed.

        Args:
            confirm: Must be True

        Returns:
            Status of the reset transcription
        """
        if not confirm:
            raise ToolError("Reset not confirmed. Call again with confirm=True.")
        session = get_session()
        session.reset()
        return _status(session)

    @mcp.tool
    async def get_status() -> DocumentStatus:
        """Overview: title, entry count, pages and storage location."""
        return _status(get_session())


def _status(session: TranscriptionSession) -> DocumentStatus:
    state = session.state
    pages = list(dict.fromkeys(entry.page for entry in state.entries))
    return DocumentStatus(
        title=state.metadata.title,
        entry_count=len(state.entries),
        pages=pages,
        storage_path=str(session.store.path),
        export_filename=build_export_filename(state),
    )
