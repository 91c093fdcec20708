"""Job-indexed target registry built from all VMs."""
from typing import Dict, Iterable, List, Optional, Set

from xo_sd.aggregator import aggregate_vm
from xo_sd.models import EndpointRegistry, Target, VmRecord
from xo_sd.tags import DEFAULT_TAG_PREFIX, TagParseError


def build_registry(
    vms: Iterable[VmRecord],
    tag_prefix: str = DEFAULT_TAG_PREFIX,
    skipped: Optional[List[TagParseError]] = None
) -> EndpointRegistry:
    """
    Fold the per-VM targets of every VM into a job -> targets mapping.

    Each VM contributes its own target to a job; targets of different VMs
    sharing a job are kept as separate entries in VM order.
    """
    registry: EndpointRegistry = {}
    for vm in vms:
        for job, target in aggregate_vm(vm, tag_prefix, skipped).items():
            registry.setdefault(job, []).append(target)
    return registry


def lookup(registry: EndpointRegistry, job_name: str) -> List[Target]:
    """Targets of a job, or an empty list for an unknown job."""
    return list(registry.get(job_name, []))


def list_jobs(registry: EndpointRegistry) -> Set[str]:
    return set(registry.keys())


def count_targets(registry: EndpointRegistry) -> int:
    return sum(len(targets) for targets in registry.values())


def registry_to_dict(registry: EndpointRegistry) -> Dict[str, List[Dict[str, object]]]:
    """JSON-ready representation of the registry."""
    return {
        job: [target.to_dict() for target in targets]
        for job, targets in registry.items()
    }
