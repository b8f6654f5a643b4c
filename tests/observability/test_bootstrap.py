from __future__ import annotations

import logging

import pytest
from prometheus_client import CollectorRegistry

from almanacengine.boot import bootstrap, configure_logging
from almanacengine.config import Settings


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_prefers_explicit_level(monkeypatch) -> None:
    monkeypatch.setenv("ALMANACENGINE_LOG_LEVEL", "ERROR")
    assert configure_logging(level="debug") == logging.DEBUG
    assert configure_logging() == logging.ERROR
    assert configure_logging(level="15") == 15


def test_configure_logging_falls_back_on_unknown_names(monkeypatch) -> None:
    monkeypatch.delenv("ALMANACENGINE_LOG_LEVEL", raising=False)
    assert configure_logging(level="chatty") == logging.WARNING
    assert configure_logging() == logging.WARNING


def test_bootstrap_applies_observability_settings(monkeypatch) -> None:
    monkeypatch.delenv("ALMANACENGINE_LOG_LEVEL", raising=False)
    registry = CollectorRegistry()
    settings = Settings(observability={"log_level": "info", "metrics_enabled": True})
    assert bootstrap(settings, registry=registry) is settings
    assert logging.getLogger().level == logging.INFO
    assert any(
        metric.name == "almanacengine_compute_errors" for metric in registry.collect()
    )


def test_bootstrap_can_skip_metrics(monkeypatch) -> None:
    monkeypatch.setenv("ALMANACENGINE_LOG_LEVEL", "error")
    registry = CollectorRegistry()
    bootstrap(Settings(observability={"metrics_enabled": False}), registry=registry)
    assert logging.getLogger().level == logging.ERROR
    assert list(registry.collect()) == []


def test_bootstrap_reads_settings_from_disk(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("ALMANACENGINE_HOME", str(tmp_path))
    monkeypatch.delenv("ALMANACENGINE_LOG_LEVEL", raising=False)
    settings = bootstrap(registry=CollectorRegistry())
    assert settings == Settings()
    assert (tmp_path / "config.yaml").exists()


def test_bootstrap_is_exported_from_the_package() -> None:
    import almanacengine
    import almanacengine.boot as boot

    assert almanacengine.bootstrap is bootstrap
    assert boot.LOG.name == "almanacengine.boot"
    assert boot.configure_logging is configure_logging
