"""Per-VM aggregation of tag directives into SD targets."""
from typing import Dict, List, Optional
import logging

from xo_sd.models import GlobalLabel, JobAddress, JobLabel, Target, VmRecord
from xo_sd.tags import DEFAULT_TAG_PREFIX, TagParseError, parse_tag

logger = logging.getLogger(__name__)


def aggregate_vm(
    vm: VmRecord,
    tag_prefix: str = DEFAULT_TAG_PREFIX,
    skipped: Optional[List[TagParseError]] = None
) -> Dict[str, Target]:
    """
    Turn one VM's tags into a target per job.

    Directives are applied in tag order, so the last occurrence of a label
    key or job address wins. Global labels are collected over the whole tag
    list first and merged afterwards; a label set on the job itself is never
    overridden by a global one.

    Args:
        vm: VM record to aggregate
        tag_prefix: Prefix marking SD tags
        skipped: Optional list collecting the parse errors of skipped tags

    Returns:
        Mapping of job name to the target this VM contributes to it
    """
    if not vm.has_address:
        logger.debug(f"VM {vm.name} has no address, skipping")
        return {}

    probes: Dict[str, Target] = {}
    global_labels: Dict[str, str] = {}

    for tag in vm.tags:
        try:
            directive = parse_tag(tag, tag_prefix)
        except TagParseError as e:
            logger.warning(f"VM {vm.name}: skipping tag: {e}")
            if skipped is not None:
                skipped.append(e)
            continue

        if directive is None:
            continue

        logger.debug(f"VM {vm.name}: {directive}")

        if isinstance(directive, GlobalLabel):
            global_labels[directive.key] = directive.value
            continue

        target = probes.setdefault(directive.job, Target())
        if isinstance(directive, JobAddress):
            target.targets = [f"{vm.address}:{directive.value}"]
        elif isinstance(directive, JobLabel):
            target.labels[directive.key] = directive.value

    for target in probes.values():
        for key, value in global_labels.items():
            target.labels.setdefault(key, value)
        if not target.targets:
            target.targets = [vm.address]

    return probes
