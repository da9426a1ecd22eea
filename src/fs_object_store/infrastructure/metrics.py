"""Prometheus metrics for Object Store."""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry, REGISTRY


class ObjectStoreMetrics:
    """Metrics collector for the object store."""

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        # Object Operations
        self.objects_created = Counter(
            "object_store_objects_created_total",
            "Total objects created",
            ["bucket"],
            registry=registry,
        )
        self.objects_deleted = Counter(
            "object_store_objects_deleted_total",
            "Total objects deleted",
            ["bucket"],
            registry=registry,
        )
        self.objects_read = Counter(
            "object_store_objects_read_total",
            "Total objects read",
            ["bucket"],
            registry=registry,
        )
        self.objects_copied = Counter(
            "object_store_objects_copied_total",
            "Total objects copied",
            ["bucket"],
            registry=registry,
        )
        self.bytes_uploaded = Counter(
            "object_store_bytes_uploaded_total",
            "Total bytes uploaded",
            ["bucket"],
            registry=registry,
        )
        self.bytes_downloaded = Counter(
            "object_store_bytes_downloaded_total",
            "Total bytes downloaded",
            ["bucket"],
            registry=registry,
        )
        self.unsatisfiable_ranges = Counter(
            "object_store_unsatisfiable_ranges_total",
            "Ranged reads that could not be satisfied",
            ["bucket"],
            registry=registry,
        )

        # Multipart Upload
        self.multipart_uploads_started = Counter(
            "object_store_multipart_uploads_started_total",
            "Total multipart uploads initiated",
            ["bucket"],
            registry=registry,
        )
        self.multipart_uploads_completed = Counter(
            "object_store_multipart_uploads_completed_total",
            "Total multipart uploads completed",
            ["bucket"],
            registry=registry,
        )
        self.multipart_uploads_aborted = Counter(
            "object_store_multipart_uploads_aborted_total",
            "Total multipart uploads aborted",
            ["bucket"],
            registry=registry,
        )
        self.multipart_parts_uploaded = Counter(
            "object_store_multipart_parts_uploaded_total",
            "Total parts uploaded in multipart uploads",
            ["bucket"],
            registry=registry,
        )

        # Storage Metrics
        self.buckets_count = Gauge(
            "object_store_buckets_count",
            "Total number of buckets",
            registry=registry,
        )

        # API Latency
        self.list_objects_latency = Histogram(
            "object_store_list_objects_latency_seconds",
            "LIST objects request latency",
            ["bucket"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0],
            registry=registry,
        )

        # Error Metrics
        self.request_errors = Counter(
            "object_store_request_errors_total",
            "Total request errors",
            ["operation", "error_type"],
            registry=registry,
        )
        self.replication_failures = Counter(
            "object_store_replication_failures_total",
            "Mirror writes that failed and were dropped",
            registry=registry,
        )


_metrics: ObjectStoreMetrics | None = None


def get_metrics() -> ObjectStoreMetrics:
    """Get the singleton metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = ObjectStoreMetrics()
    return _metrics
