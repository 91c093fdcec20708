"""Request-scoped target discovery: fetch VMs, build the registry."""
import json
import time
import logging
from typing import List, Optional

from xo_sd.models import EndpointRegistry
from xo_sd.registry import build_registry, count_targets, registry_to_dict
from xo_sd.self_metrics import SelfMetrics
from xo_sd.tags import DEFAULT_TAG_PREFIX, TagParseError
from xo_sd.xo_client import DirectoryError, XoClient

logger = logging.getLogger(__name__)


class TargetDiscovery:
    """Builds a fresh target registry from XOA on every call."""

    def __init__(
        self,
        client: XoClient,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        self_metrics: Optional[SelfMetrics] = None
    ):
        self.client = client
        self.tag_prefix = tag_prefix
        self.self_metrics = self_metrics

    async def build(self) -> EndpointRegistry:
        """
        Fetch all VMs and build the job -> targets registry.

        Raises:
            DirectoryError: If XOA cannot be queried. No partial registry is
                returned in that case.
        """
        start_time = time.time()

        try:
            vms = await self.client.get_vms()
        except DirectoryError as e:
            logger.error(f"Failed to list VMs: {e}")
            if self.self_metrics:
                self.self_metrics.record_build("error", time.time() - start_time)
            raise

        skipped: List[TagParseError] = []
        registry = build_registry(vms, self.tag_prefix, skipped)
        target_count = count_targets(registry)

        if self.self_metrics:
            self.self_metrics.record_build("success", time.time() - start_time)
            self.self_metrics.record_vms(
                len(vms), sum(1 for vm in vms if not vm.has_address)
            )
            self.self_metrics.record_malformed_tags(len(skipped))
            self.self_metrics.record_registry(len(registry), target_count)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Built registry from {len(vms)} VMs: {len(registry)} jobs, "
                f"{target_count} targets, {len(skipped)} malformed tags"
            )
            logger.debug(json.dumps(registry_to_dict(registry)))

        return registry
