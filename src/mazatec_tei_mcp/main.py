"""Entry point for mazatec-tei-mcp Server.

MCP Server for transcribing the bilingual Mazatec/Spanish manuscript into
TEI P5. Aggregates the transcription server via FastMCP mount().
"""

import logging

from fastmcp import FastMCP

from mazatec_tei_mcp.config.base import settings
from mazatec_tei_mcp.servers.transcription import server as transcription

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Main aggregator server
app = FastMCP(
    name=settings.server_name,
    instructions="""
    MCP Server for transcribing a historical Mazatec/Spanish/English manuscript into TEI P5.

    The server holds one transcription: document metadata plus an ordered list
    of entries (one per manuscript line). Every change is saved immediately.

    Typical workflow:
    1. tx_get_status / tx_list_entries → Get overview and entry IDs
    2. tx_update_metadata → Fill in the TEI header
    3. tx_add_entry, tx_update_entry → Transcribe line by line
    4. tx_add_note, tx_set_variant, tx_add_kirk_set → Annotate entries
    5. tx_render_document or tx_export_document → Get the TEI XML
    6. tx_import_document → Continue from a previous export
    """,
)

# Mount transcription server with prefix
app.mount(server=transcription.mcp, prefix="tx")


# For direct execution
def main() -> None:
    """Run the MCP server."""
    logger.info("Starting Mazatec TEI MCP Server...")
    logger.info(f"Server name: {settings.server_name}")
    logger.info(f"State file: {settings.state_path}")
    app.run()


if __name__ == "__main__":
    main()
