"""Pytest configuration and shared fixtures for Object Store tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from fs_object_store.adapters.outbound.filesystem_store import FilesystemStore
from fs_object_store.infrastructure.config import Config, ObservabilityConfig, StorageConfig
from fs_object_store.infrastructure.container import Container
from fs_object_store.infrastructure.metrics import ObjectStoreMetrics


@pytest.fixture(autouse=True)
def reset_container():
    """Reset the DI container before each test."""
    Container.reset()
    yield
    Container.reset()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="object_store_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def data_dir(temp_dir: Path) -> Path:
    return temp_dir / "data"


@pytest.fixture
def test_config(data_dir: Path) -> Config:
    """Provide a test configuration rooted in a temporary directory."""
    return Config(
        storage=StorageConfig(data_dir=str(data_dir), chunk_size=1024),
        observability=ObservabilityConfig(console_tracing=False),
    )


@pytest.fixture
def metrics() -> ObjectStoreMetrics:
    """Metrics bound to a private registry so tests never collide."""
    return ObjectStoreMetrics(registry=CollectorRegistry())


@pytest.fixture
def store(data_dir: Path, metrics: ObjectStoreMetrics) -> FilesystemStore:
    """A store with small chunks so streaming paths are exercised."""
    return FilesystemStore(data_dir, chunk_size=4, metrics=metrics)


@pytest.fixture
def sample_object_data() -> bytes:
    """Provide sample object data for testing."""
    return b"Hello, World! This is test data for the object store."


# Pytest markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
