"""Dependency injection container for Object Store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import structlog
from opentelemetry import trace

from fs_object_store.adapters.outbound.filesystem_store import FilesystemStore
from fs_object_store.adapters.outbound.replication import LocalDirectoryMirror
from fs_object_store.domain.services.key_codec import select_key_codec
from fs_object_store.infrastructure.config import Config, get_config
from fs_object_store.infrastructure.logging import setup_logging
from fs_object_store.infrastructure.metrics import ObjectStoreMetrics, get_metrics
from fs_object_store.infrastructure.tracing import setup_tracing


@dataclass
class Container:
    """Dependency injection container for object store components."""

    config: Config
    logger: structlog.stdlib.BoundLogger
    tracer: trace.Tracer
    metrics: ObjectStoreMetrics
    store: FilesystemStore

    _instance: ClassVar["Container | None"] = None

    @classmethod
    def create(
        cls,
        config: Config | None = None,
        metrics: ObjectStoreMetrics | None = None,
    ) -> "Container":
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        logger = setup_logging(
            level=config.observability.log_level,
            log_format=config.observability.log_format,
            environment=config.observability.environment,
        )
        tracer = setup_tracing(config.observability)
        metrics = metrics or get_metrics()

        mirror = None
        if config.replication.enabled and config.replication.mirror_dir:
            mirror = LocalDirectoryMirror(config.replication.mirror_dir)

        store = FilesystemStore(
            config.storage.data_dir,
            key_codec=select_key_codec(config.storage.key_codec),
            chunk_size=config.storage.chunk_size,
            mirror=mirror,
            metrics=metrics,
            tracer=tracer,
            logger=logger,
        )

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            store=store,
        )

        logger.info(
            "object_store_container_initialized",
            data_dir=config.storage.data_dir,
            key_codec=config.storage.key_codec,
            replication_enabled=mirror is not None,
        )

        return cls._instance

    @classmethod
    def get(cls) -> "Container":
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
