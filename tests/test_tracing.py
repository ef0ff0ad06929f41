"""Tests for AIClient tracing spans."""

import pytest
from fakes import FakeApiKeyManager
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from rubberduck import tracing
from rubberduck.ai.client import AIClient
from rubberduck.config import FileSettingsSource, StaticSettingsSource, TracingSettings
from rubberduck.errors import ConfigurationError

_exporter = InMemorySpanExporter()


@pytest.fixture(scope="module", autouse=True)
def tracer_provider():
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(_exporter))
    trace.set_tracer_provider(provider)
    yield provider


@pytest.fixture
def exporter():
    _exporter.clear()
    return _exporter


@pytest.mark.asyncio
async def test_stream_text_span(logger, transport, exporter):
    client = AIClient(
        FakeApiKeyManager(), logger, "https://api.test/v1", StaticSettingsSource("gpt-4"), transport
    )

    async with await client.stream_text("hello", max_tokens=5):
        pass

    (span,) = exporter.get_finished_spans()
    assert span.name == "ai.stream_text"
    assert span.attributes["llm.model"] == "gpt-4"
    assert span.attributes["llm.max_tokens"] == 5
    assert span.status.status_code == trace.StatusCode.OK


@pytest.mark.asyncio
async def test_generate_embedding_error_span(logger, transport, exporter):
    client = AIClient(
        FakeApiKeyManager(None), logger, "https://api.test/v1", StaticSettingsSource(), transport
    )

    await client.generate_embedding("x")

    (span,) = exporter.get_finished_spans()
    assert span.name == "ai.generate_embedding"
    assert span.status.status_code == trace.StatusCode.ERROR


@pytest.mark.asyncio
async def test_stream_text_failure_records_exception_once(logger, transport, exporter):
    client = AIClient(
        FakeApiKeyManager(), logger, "https://api.test/v1", StaticSettingsSource("gpt-2"), transport
    )

    with pytest.raises(ConfigurationError):
        await client.stream_text("hello", max_tokens=5)

    (span,) = exporter.get_finished_spans()
    assert span.status.status_code == trace.StatusCode.ERROR
    assert [event.name for event in span.events] == ["exception"]


@pytest.mark.asyncio
async def test_generate_embedding_failure_records_exception_once(logger, transport, exporter):
    client = AIClient(
        FakeApiKeyManager(None), logger, "https://api.test/v1", StaticSettingsSource(), transport
    )

    await client.generate_embedding("x")

    (span,) = exporter.get_finished_spans()
    assert [event.name for event in span.events] == ["exception"]


# ============================================================================
# Provider setup from [tracing] settings
# ============================================================================


def test_provider_uses_settings_from_file(tmp_path):
    config_file = tmp_path / "rubberduck.toml"
    config_file.write_text(
        '[tracing]\nenabled = true\nservice_name = "duck-ci"\notlp_endpoint = "http://otel:4317"\n'
    )
    settings = FileSettingsSource(config_file).get_tracing_settings()
    spans = InMemorySpanExporter()

    provider = tracing.build_tracer_provider(settings, exporter=spans)
    with provider.get_tracer("test").start_as_current_span("lookup"):
        pass
    provider.force_flush()
    provider.shutdown()

    (span,) = spans.get_finished_spans()
    assert span.resource.attributes["service.name"] == "duck-ci"
    assert span.resource.attributes["service.version"] == tracing.__version__
    assert "deployment.environment" not in span.resource.attributes


def test_init_telemetry_disabled_installs_nothing(monkeypatch):
    installed = []
    monkeypatch.setattr(tracing.trace, "set_tracer_provider", installed.append)

    assert tracing.init_telemetry(TracingSettings(enabled=False)) is None
    tracing.shutdown_telemetry()

    assert installed == []


def test_init_and_shutdown_telemetry(monkeypatch):
    installed = []
    build = tracing.build_tracer_provider
    monkeypatch.setattr(tracing.trace, "set_tracer_provider", installed.append)
    monkeypatch.setattr(
        tracing,
        "build_tracer_provider",
        lambda settings: build(settings, exporter=InMemorySpanExporter()),
    )

    settings = TracingSettings(enabled=True, service_name="rubberduck-test")
    provider = tracing.init_telemetry(settings)

    assert installed == [provider]
    assert provider.resource.attributes["service.name"] == "rubberduck-test"
    assert tracing.init_telemetry(settings) is None

    tracing.shutdown_telemetry()
    assert tracing._provider is None
