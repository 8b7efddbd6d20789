"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Pin every setting so a developer's .env or shell cannot leak into tests
TEST_ENV = {
    "COGNISHELF_INDEX_FIELDS": "title,content,description,tags",
    "COGNISHELF_ID_FIELD": "id",
    "COGNISHELF_TOKEN_MIN_LENGTH": "2",
    "COGNISHELF_TOKEN_MAX_LENGTH": "50",
    "COGNISHELF_USE_BIGRAM": "true",
    "COGNISHELF_REMOVE_STOPWORDS": "true",
    "COGNISHELF_KEEP_NUMBERS": "true",
    "COGNISHELF_SEARCH_LIMIT": "100",
    "COGNISHELF_MIN_SCORE": "0.1",
    "COGNISHELF_SEARCH_MODE": "auto",
    "COGNISHELF_LOG_LEVEL": "info",
    "COGNISHELF_LOG_JSON": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value
os.environ.pop("COGNISHELF_SNAPSHOT_PATH", None)

from cognishelf_search.search.inverted_index import InvertedIndex  # noqa: E402


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset test defaults before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("COGNISHELF_SNAPSHOT_PATH", raising=False)


@pytest.fixture
def project_documents():
    """The two-document corpus used by the index scenarios."""
    return [
        {"id": "1", "title": "プロジェクト管理"},
        {"id": "2", "title": "リスク管理"},
    ]


@pytest.fixture
def project_index(project_documents):
    index = InvertedIndex()
    for document in project_documents:
        index.add_document(document["id"], document, ["title"])
    return index


@pytest.fixture
def template_documents():
    """Mixed Japanese/English templates resembling real prompt records."""
    return [
        {
            "id": "t-meeting",
            "title": "週次会議アジェンダ",
            "content": "Weekly meeting agenda and action items",
            "description": "定例会議の議題を整理する",
            "tags": ["meeting", "weekly"],
        },
        {
            "id": "t-risk",
            "title": "リスク管理表",
            "content": "Risk register with mitigation plans",
            "description": "プロジェクトのリスクを洗い出す",
            "tags": ["risk", "planning"],
        },
        {
            "id": "t-report",
            "title": "Status Report",
            "content": "Monthly status report for stakeholders 2024",
            "description": "月次報告書のテンプレート",
            "tags": ["report", "monthly"],
        },
    ]
