"""Unit tests for the benchmark helpers."""

import pytest

from cognishelf_search.adapters.document_store import InMemoryDocumentStore
from cognishelf_search.benchmark import (
    BenchmarkResult,
    benchmark_full_text_search,
    compare_benchmark,
    generate_test_documents,
    measure_performance,
)
from cognishelf_search.service_layer.search_service import DocumentSearchService


@pytest.mark.unit
class TestMeasurement:
    def test_measure_performance_counts_sequences(self):
        result, timing = measure_performance(lambda: [1, 2, 3], "list")

        assert result == [1, 2, 3]
        assert timing.label == "list"
        assert timing.result_count == 3
        assert timing.duration_ms >= 0

    def test_measure_performance_scalar_counts_one(self):
        _result, timing = measure_performance(lambda: 42)
        assert timing.label == "Operation"
        assert timing.result_count == 1

    def test_compare_keeps_order(self):
        results = compare_benchmark([("first", lambda: []), ("second", lambda: ["x"])])

        assert [r.label for r in results] == ["first", "second"]
        assert [r.result_count for r in results] == [0, 1]
        assert compare_benchmark([]) == []


@pytest.mark.unit
class TestFullTextBenchmark:
    @pytest.fixture
    def service(self):
        return DocumentSearchService(InMemoryDocumentStore(generate_test_documents(12)))

    def test_generated_documents_have_no_ids(self):
        documents = generate_test_documents(5)

        assert len(documents) == 5
        assert all("id" not in document for document in documents)
        assert documents[0]["tags"] == ["daily", "weekly"]

    def test_both_modes_find_the_same_documents(self, service):
        service.build_index()

        report = benchmark_full_text_search(service, "会議")

        assert report["query"] == "会議"
        assert [r.label for r in report["results"]] == [
            "Full-Text Search (Inverted Index)",
            "Simple Search (Linear Scan)",
        ]
        assert [r.result_count for r in report["results"]] == [3, 3]
        assert report["speedup"] is None or report["speedup"] > 0

    def test_index_not_ready_measures_scan_only(self, service):
        report = benchmark_full_text_search(service)

        assert report["speedup"] is None
        assert len(report["results"]) == 1
        assert isinstance(report["results"][0], BenchmarkResult)
        assert service.index_ready is False
