"""Pydantic models for configuration validation."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

# Values shipped in example .env files that must not count as real credentials
PLACEHOLDER_VALUES = {"", "your_openai_api_key_here", "your_notion_api_key_here"}


def _is_set(value: Optional[str]) -> bool:
    return value is not None and value.strip() not in PLACEHOLDER_VALUES


class NotionConfig(BaseModel):
    """Notion API configuration."""

    api_key: Optional[str] = Field(default=None, description="Notion integration API key")
    rate_limit_delay: float = Field(
        default=0.35, ge=0.0, description="Delay between API calls (seconds)"
    )
    max_retries: int = Field(default=3, ge=1, description="Attempts for transient API errors")
    retry_backoff: float = Field(
        default=1.0, ge=0.0, description="Base backoff (seconds), multiplied by attempt number"
    )
    database_id: Optional[str] = Field(
        default=None, description="Blog database ID (searched by name if omitted)"
    )
    database_query: str = Field(default="Blogs", description="Search query used to find the database")


class TTSConfig(BaseModel):
    """Text-to-speech provider configuration."""

    api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    model: str = Field(default="tts-1", description="Speech model name")
    voice: str = Field(default="onyx", description="Voice name")
    response_format: str = Field(default="opus", description="Audio format")
    speed: float = Field(default=1.0, ge=0.25, le=4.0, description="Playback speed")
    max_chunk_length: int = Field(
        default=4000, gt=0, le=4096, description="Maximum characters per synthesis request"
    )
    max_retries: int = Field(default=3, ge=1, description="Attempts per chunk")
    retry_backoff: float = Field(
        default=1.0, ge=0.0, description="Base retry backoff (seconds), multiplied by attempt number"
    )
    chunk_pause: float = Field(default=0.5, ge=0.0, description="Pause between chunk requests")


class StorageConfig(BaseModel):
    """Cloudflare R2 object storage configuration."""

    account_id: Optional[str] = Field(default=None, description="Cloudflare account ID")
    access_key_id: Optional[str] = Field(default=None, description="R2 access key ID")
    secret_access_key: Optional[str] = Field(default=None, description="R2 secret access key")
    bucket_name: Optional[str] = Field(default=None, description="R2 bucket name")
    public_url: Optional[str] = Field(
        default=None, description="Public base URL (defaults to https://<bucket>.r2.dev)"
    )
    key_prefix: str = Field(default="blog-audio", description="Object key prefix for audio")

    @field_validator("public_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Normalize public URL so keys can be appended with a single slash."""
        return v.rstrip("/") if v else v


class WriterConfig(BaseModel):
    """Chunked payload writer configuration."""

    field_base: str = Field(default="Content64", description="Name of the first payload property")
    max_fields: int = Field(default=15, ge=1, description="Number of payload properties available")
    span_size: int = Field(
        default=2000, gt=0, le=2000, description="Maximum characters per rich text span"
    )
    spans_per_field: int = Field(
        default=100, gt=0, le=100, description="Maximum rich text spans per property"
    )
    field_pause: float = Field(default=0.35, ge=0.0, description="Pause between property writes")
    max_retries: int = Field(default=3, ge=1, description="Attempts per property write")
    retry_backoff: float = Field(default=1.0, ge=0.0, description="Base retry backoff (seconds)")
    fragile_fields: List[int] = Field(
        default_factory=list,
        description="1-based property positions that get smaller payloads and an extra pause",
    )
    fragile_spans_per_field: int = Field(
        default=50, gt=0, le=100, description="Span count used at fragile positions"
    )
    fragile_pause: float = Field(default=2.0, ge=0.0, description="Extra pause before fragile writes")

    @field_validator("fragile_fields")
    @classmethod
    def validate_positions(cls, v: List[int]) -> List[int]:
        """Fragile positions are 1-based."""
        for position in v:
            if position < 1:
                raise ValueError(f"Invalid fragile field position: {position}. Positions start at 1")
        return sorted(set(v))


class ExportConfig(BaseModel):
    """NotebookLM export configuration."""

    output_dir: str = Field(default="notebooklm_output", description="Export directory")
    processed_dir: str = Field(
        default="notebooklm_processed", description="Directory for synced media sidecars"
    )
    site_base_url: str = Field(
        default="https://getcolby.com/blog", description="Public blog base URL for exported posts"
    )
    min_content_length: int = Field(
        default=100, ge=0, description="Pages with less extracted text are skipped"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    notion: NotionConfig = Field(default_factory=NotionConfig, description="Notion configuration")
    tts: TTSConfig = Field(default_factory=TTSConfig, description="Text-to-speech configuration")
    storage: StorageConfig = Field(
        default_factory=StorageConfig, description="Object storage configuration"
    )
    writer: WriterConfig = Field(
        default_factory=WriterConfig, description="Chunked payload writer configuration"
    )
    export: ExportConfig = Field(default_factory=ExportConfig, description="Export configuration")

    def require_notion(self) -> None:
        """Raise if the Notion API key is missing."""
        if not _is_set(self.notion.api_key):
            raise ValueError("NOTION_API_KEY is not set in environment variables")

    def require_tts(self) -> None:
        """Raise if the speech provider key is missing."""
        if not _is_set(self.tts.api_key):
            raise ValueError("OPENAI_API_KEY is not set in environment variables")

    def require_storage(self) -> None:
        """Raise if any required R2 credential is missing."""
        missing = [
            name
            for name, value in (
                ("CLOUDFLARE_ACCOUNT_ID", self.storage.account_id),
                ("CLOUDFLARE_R2_ACCESS_KEY_ID", self.storage.access_key_id),
                ("CLOUDFLARE_R2_SECRET_ACCESS_KEY", self.storage.secret_access_key),
                ("CLOUDFLARE_R2_BUCKET_NAME", self.storage.bucket_name),
            )
            if not _is_set(value)
        ]
        if missing:
            raise ValueError(f"Cloudflare R2 credentials not configured: {', '.join(missing)}")
