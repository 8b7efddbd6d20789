"""Timing helpers comparing indexed search with a linear scan.

Intended for ad-hoc checks from a REPL or script::

    store = InMemoryDocumentStore(generate_test_documents(1000))
    service = DocumentSearchService.from_settings(store)
    service.build_index()
    benchmark_full_text_search(service, "会議")
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from cognishelf_search.service_layer.search_service import DocumentSearchService


logger = logging.getLogger(__name__)

_CATEGORIES = ("会議・コミュニケーション", "ドキュメント作成", "プロジェクト管理", "リスク管理")
_TAGS = ("daily", "weekly", "monthly", "important", "urgent")


@dataclass(frozen=True)
class BenchmarkResult:
    label: str
    duration_ms: float
    result_count: int


def measure_performance(fn: Callable[[], Any], label: str = "Operation") -> tuple[Any, BenchmarkResult]:
    """Run ``fn`` once and return its result together with the timing."""
    start = time.perf_counter()
    result = fn()
    duration_ms = (time.perf_counter() - start) * 1000
    count = len(result) if isinstance(result, Sequence) and not isinstance(result, str) else 1
    logger.info("[Benchmark] %s: %.2fms", label, duration_ms)
    return result, BenchmarkResult(label=label, duration_ms=duration_ms, result_count=count)


def compare_benchmark(tests: Sequence[tuple[str, Callable[[], Any]]]) -> list[BenchmarkResult]:
    """Time each ``(label, fn)`` pair in order and log the fastest."""
    results = [measure_performance(fn, label)[1] for label, fn in tests]
    if results:
        fastest = min(results, key=lambda r: r.duration_ms)
        logger.info("Fastest: %s (%.2fms)", fastest.label, fastest.duration_ms)
    return results


def benchmark_full_text_search(service: DocumentSearchService, query: str = "会議") -> dict[str, Any]:
    """Compare the service's fulltext and simple modes for ``query``.

    Returns the per-mode results and the speedup of fulltext over the scan
    (``None`` when the index is not ready or a timing rounds to zero).
    """
    if not service.index_ready:
        logger.warning("Index not ready; only the linear scan is measured")
        results = compare_benchmark([("Simple Search (Linear Scan)", lambda: service.search(query, mode="simple"))])
        return {"query": query, "results": results, "speedup": None}

    results = compare_benchmark(
        [
            ("Full-Text Search (Inverted Index)", lambda: service.search(query, mode="fulltext")),
            ("Simple Search (Linear Scan)", lambda: service.search(query, mode="simple")),
        ]
    )
    indexed, scan = results
    speedup = scan.duration_ms / indexed.duration_ms if indexed.duration_ms > 0 else None
    if speedup is not None:
        logger.info("Speedup: %.2fx faster with full-text search", speedup)
    return {"query": query, "results": results, "speedup": speedup}


def generate_test_documents(count: int = 1000) -> list[dict[str, Any]]:
    """Synthetic template-like documents (no ids; stores assign them)."""
    documents = []
    for i in range(count):
        documents.append(
            {
                "title": f"Test Template {i}",
                "category": _CATEGORIES[i % len(_CATEGORIES)],
                "tags": [_TAGS[i % len(_TAGS)], _TAGS[(i + 1) % len(_TAGS)]],
                "description": f"Test description for template {i} {_CATEGORIES[i % len(_CATEGORIES)]}",
                "content": f"Test prompt template {i}",
            }
        )
    return documents
