"""FastMCP Server for manuscript transcription."""

from fastmcp import FastMCP

from mazatec_tei_mcp.servers.transcription.resources.documents import (
    register_transcription_resources,
)
from mazatec_tei_mcp.servers.transcription.tools.annotations import (
    register_annotation_tools,
)
from mazatec_tei_mcp.servers.transcription.tools.documents import (
    register_document_tools,
)
from mazatec_tei_mcp.servers.transcription.tools.entries import register_entry_tools
from mazatec_tei_mcp.servers.transcription.tools.metadata import (
    register_metadata_tools,
)
from mazatec_tei_mcp.servers.transcription.utils.session import get_session

# FastMCP Server Instance
mcp = FastMCP("Mazatec Manuscript Transcription")

# Register resources
register_transcription_resources(mcp, get_session)

# Register tools from submodules
register_metadata_tools(mcp, get_session)
register_entry_tools(mcp, get_session)
register_annotation_tools(mcp, get_session)
register_document_tools(mcp, get_session)
