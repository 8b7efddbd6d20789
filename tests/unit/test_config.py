"""Unit tests for environment-driven settings."""

from pathlib import Path

from pydantic import ValidationError
import pytest

from cognishelf_search.config import Settings
from cognishelf_search.search.tokenizer import TokenizerOptions


@pytest.mark.unit
class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.get_index_fields() == ["title", "content", "description", "tags"]
        assert settings.id_field == "id"
        assert settings.search_limit == 100
        assert settings.min_score == 0.1
        assert settings.search_mode == "auto"
        assert settings.snapshot_path is None
        assert settings.tokenizer_options() == TokenizerOptions()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("COGNISHELF_INDEX_FIELDS", " name , body ,")
        monkeypatch.setenv("COGNISHELF_USE_BIGRAM", "false")
        monkeypatch.setenv("COGNISHELF_TOKEN_MIN_LENGTH", "3")
        monkeypatch.setenv("COGNISHELF_SEARCH_MODE", "simple")
        monkeypatch.setenv("COGNISHELF_SNAPSHOT_PATH", "/tmp/cognishelf/index.json")

        settings = Settings()

        assert settings.get_index_fields() == ["name", "body"]
        assert settings.search_mode == "simple"
        assert settings.snapshot_path == Path("/tmp/cognishelf/index.json")
        assert settings.tokenizer_options() == TokenizerOptions(min_length=3, use_bigram=False)

    def test_min_length_above_max_rejected(self, monkeypatch):
        monkeypatch.setenv("COGNISHELF_TOKEN_MIN_LENGTH", "10")
        monkeypatch.setenv("COGNISHELF_TOKEN_MAX_LENGTH", "5")

        with pytest.raises(ValidationError, match="must not exceed"):
            Settings()

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("COGNISHELF_SEARCH_MODE", "fuzzy"),
            ("COGNISHELF_MIN_SCORE", "1.5"),
            ("COGNISHELF_SEARCH_LIMIT", "0"),
        ],
    )
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings()
