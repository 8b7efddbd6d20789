"""Centralized configuration for cognishelf-search using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cognishelf_search.search.tokenizer import TokenizerOptions


SearchMode = Literal["auto", "fulltext", "simple", "persistence"]


class Settings(BaseSettings):
    """Typed configuration loaded from ``COGNISHELF_*`` environment variables.

    Every value has a default, so ``Settings()`` works without any
    environment. Values are validated at construction time.
    """

    model_config = SettingsConfigDict(
        env_prefix="COGNISHELF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Indexing
    index_fields: str = Field(
        default="title,content,description,tags",
        description="Comma-separated document fields fed to the tokenizer",
    )
    id_field: str = Field(default="id", min_length=1, description="Document attribute holding the unique id")

    # Tokenizer
    token_min_length: int = Field(default=2, ge=1, description="Shortest whole word kept as a token")
    token_max_length: int = Field(default=50, ge=1, description="Longest whole word kept as a token")
    use_bigram: bool = Field(default=True, description="Decompose CJK words into character bigrams")
    remove_stopwords: bool = Field(default=True, description="Drop Japanese and English stopwords")
    keep_numbers: bool = Field(default=True, description="Keep purely numeric words as tokens")

    # Search
    search_limit: int = Field(default=100, ge=1, description="Maximum results returned per query")
    min_score: float = Field(default=0.1, ge=0.0, le=1.0, description="Minimum overlap score for a hit")
    search_mode: SearchMode = Field(
        default="auto",
        description="auto (index when ready, else scan), fulltext, simple (linear scan) or persistence",
    )

    # Snapshot cache
    snapshot_path: Path | None = Field(default=None, description="Optional JSON file caching the exported index")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON log lines")

    @model_validator(mode="after")
    def _check_token_bounds(self) -> "Settings":
        if self.token_min_length > self.token_max_length:
            raise ValueError(
                f"COGNISHELF_TOKEN_MIN_LENGTH ({self.token_min_length}) must not exceed "
                f"COGNISHELF_TOKEN_MAX_LENGTH ({self.token_max_length})"
            )
        return self

    def get_index_fields(self) -> list[str]:
        """Get list of indexed field names (comma-separated)."""
        return [name.strip() for name in self.index_fields.split(",") if name.strip()]

    def tokenizer_options(self) -> TokenizerOptions:
        return TokenizerOptions(
            min_length=self.token_min_length,
            max_length=self.token_max_length,
            use_bigram=self.use_bigram,
            remove_stopwords=self.remove_stopwords,
            keep_numbers=self.keep_numbers,
        )
