"""Configuration for mazatec-tei-mcp."""

from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env is located)
# This module is in src/mazatec_tei_mcp/config/base.py
# Project root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


class Settings(BaseSettings):
    """Global settings, loaded from environment variables or .env"""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_prefix="TRANSCRIPTION_",
        case_sensitive=False,
    )

    # Persistence
    data_dir: Path = Field(
        default=Path("~/.local/share/mazatec-tei-mcp").expanduser(),
        description="Directory holding the persisted transcription state",
    )
    storage_key: str = Field(
        default="transcription_data_v4",
        description="Versioned key of the persisted state blob",
    )

    # Export
    export_dir: Path = Field(
        default=Path("exports"),
        description="Directory receiving exported documents",
    )
    export_keyword: str = Field(
        default="Mazatec", description="Keyword used in export filenames"
    )

    # Entry defaults
    default_page: str = Field(
        default="000032278_0004", description="Page of the first default entry"
    )
    default_line: str = Field(
        default="1.1", description="Line number of the first default entry"
    )
    line_step: Decimal = Field(
        default=Decimal("1"), description="Line increment used when adding entries"
    )
    duplicate_line_step: Decimal = Field(
        default=Decimal("0.1"),
        description="Line increment used when duplicating entries",
    )
    default_resp: str = Field(
        default="IK", description="Responsibility code assigned to new notes"
    )

    # Server
    server_name: str = Field(
        default="Manuscript Transcription", description="Name of the MCP Server"
    )

    @property
    def state_path(self) -> Path:
        """Location of the persisted state blob."""
        return self.data_dir / f"{self.storage_key}.json"


# Singleton instance
settings = Settings()

# TEI Namespace constants
TEI_NAMESPACE = "http://www.tei-c.org/ns/1.0"
TEI_NS = {"tei": TEI_NAMESPACE}
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
TEI_MODEL_HREF = (
    "http://www.tei-c.org/release/xml/tei/custom/schema/relaxng/tei_all.rng"
)
