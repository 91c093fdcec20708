"""Self-monitoring metrics for the SD service using prometheus_client."""
from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry


class SelfMetrics:
    """Self-monitoring metrics for target discovery."""

    def __init__(self, registry=None, prefix=""):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.builds_total = Counter(
            f"{prefix}sd_builds_total",
            "Total number of target registry builds",
            ["outcome"],
            registry=registry
        )

        self.build_duration_seconds = Histogram(
            f"{prefix}sd_build_duration_seconds",
            "Duration of a registry build including the XOA request",
            buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=registry
        )

        self.vms = Gauge(
            f"{prefix}sd_vms",
            "Number of VMs listed by XOA in the last build",
            registry=registry
        )

        self.vms_without_address = Gauge(
            f"{prefix}sd_vms_without_address",
            "Number of VMs skipped for lack of an address in the last build",
            registry=registry
        )

        self.malformed_tags_total = Counter(
            f"{prefix}sd_malformed_tags_total",
            "Total number of malformed SD tags skipped",
            registry=registry
        )

        self.jobs = Gauge(
            f"{prefix}sd_jobs",
            "Number of jobs in the last built registry",
            registry=registry
        )

        self.targets = Gauge(
            f"{prefix}sd_targets",
            "Number of targets in the last built registry",
            registry=registry
        )

    def record_build(self, outcome: str, duration: float):
        """Record a finished build."""
        self.builds_total.labels(outcome=outcome).inc()
        self.build_duration_seconds.observe(duration)

    def record_vms(self, total: int, without_address: int):
        self.vms.set(total)
        self.vms_without_address.set(without_address)

    def record_malformed_tags(self, count: int):
        if count:
            self.malformed_tags_total.inc(count)

    def record_registry(self, jobs: int, targets: int):
        self.jobs.set(jobs)
        self.targets.set(targets)
