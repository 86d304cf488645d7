"""
Unit tests for tracing helpers and Prometheus metric helpers.
"""

from unittest.mock import MagicMock, Mock, patch

import pytest
from prometheus_client import CollectorRegistry, Counter

from utils.metrics import get_or_create_metric, write_metrics_file
from utils.tracing import add_span_attributes, get_tracer, trace_operation
from utils.tracing import tracer as tracer_module


class TestGetOrCreateMetric:
    """Test duplicate-safe metric registration"""

    def test_second_registration_returns_existing(self):
        registry = CollectorRegistry()

        def factory():
            return Counter("dbdiff_test_total", "Test counter", registry=registry)

        first = get_or_create_metric(factory, "dbdiff_test_total", registry)
        second = get_or_create_metric(factory, "dbdiff_test_total", registry)

        assert first is second

    def test_unrelated_value_error_propagates(self):
        def factory():
            raise ValueError("bad metric name")

        with pytest.raises(ValueError, match="bad metric name"):
            get_or_create_metric(factory, "missing_total", CollectorRegistry())


class TestWriteMetricsFile:
    """Test textfile export"""

    def test_writes_prometheus_text(self, tmp_path):
        registry = CollectorRegistry()
        counter = Counter("dbdiff_rows_total", "Rows", ["table"], registry=registry)
        counter.labels(table="orders").inc(3)
        path = tmp_path / "metrics" / "dbdiff.prom"

        write_metrics_file(str(path), registry)

        content = path.read_text()
        assert 'dbdiff_rows_total{table="orders"} 3.0' in content


class TestTraceOperation:
    """Test span helpers against the no-op provider"""

    def test_yields_span_and_sets_attributes(self):
        with trace_operation("diff_table", table="orders", rows=3) as span:
            add_span_attributes(new_rows=1)

        assert span is not None

    def test_exception_recorded_and_reraised(self):
        span = Mock()
        tracer = MagicMock()
        tracer.start_as_current_span.return_value.__enter__.return_value = span
        tracer.start_as_current_span.return_value.__exit__.return_value = False

        with patch("utils.tracing.context.get_tracer", return_value=tracer):
            with pytest.raises(RuntimeError, match="boom"):
                with trace_operation("snapshot_query", snapshot="after"):
                    raise RuntimeError("boom")

        span.set_attribute.assert_any_call("snapshot", "after")
        span.set_attribute.assert_any_call("error", True)
        span.set_attribute.assert_any_call("error.type", "RuntimeError")
        span.record_exception.assert_called_once()

    def test_get_tracer(self):
        assert get_tracer() is not None


class TestInitializeTracing:
    """Test tracer provider setup"""

    def test_otlp_exporter_configured(self, monkeypatch):
        monkeypatch.setattr(tracer_module, "_provider", None)

        with patch.object(tracer_module, "OTLPSpanExporter") as mock_exporter, \
                patch.object(tracer_module, "BatchSpanProcessor"), \
                patch.object(tracer_module.trace, "set_tracer_provider") as mock_set:
            tracer_module.initialize_tracing(otlp_endpoint="collector:4317")

            mock_exporter.assert_called_once_with(endpoint="collector:4317", insecure=True)
            mock_set.assert_called_once()

        provider = tracer_module._provider
        assert provider is not None
        tracer_module.shutdown_tracing()
        assert tracer_module._provider is None

    def test_shutdown_without_init_is_noop(self, monkeypatch):
        monkeypatch.setattr(tracer_module, "_provider", None)

        tracer_module.shutdown_tracing()
