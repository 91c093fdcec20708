"""Parsing of `prom:<job>:<key>=<value>` VM tags."""
from typing import Optional

from xo_sd.models import GlobalLabel, JobAddress, JobLabel, TagDirective

DEFAULT_TAG_PREFIX = "prom"


class TagParseError(ValueError):
    """Raised for a tag that carries the prefix but not the expected shape."""

    def __init__(self, tag: str, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f"Malformed tag {tag!r}: {reason}")


def parse_tag(tag: str, prefix: str = DEFAULT_TAG_PREFIX) -> Optional[TagDirective]:
    """
    Parse one VM tag into a directive.

    Args:
        tag: Raw tag string as attached to the VM
        prefix: Tag prefix marking SD directives (without the trailing colon)

    Returns:
        The directive, or None when the tag does not carry the prefix

    Raises:
        TagParseError: If the tag carries the prefix but is not
            `<prefix>:<job>:<key>=<value>`
    """
    if not tag.startswith(f"{prefix}:"):
        return None

    # prefix, job, key=value; anything after the second colon belongs to the value
    parts = tag.split(":", 2)
    if len(parts) != 3:
        raise TagParseError(tag, "expected '<prefix>:<job>:<key>=<value>'")

    _, job, assignment = parts
    key, sep, value = assignment.partition("=")
    if not sep:
        raise TagParseError(tag, "missing '=' between label key and value")

    if not job:
        return GlobalLabel(key=key, value=value)
    if key == job:
        return JobAddress(job=job, value=value)
    return JobLabel(job=job, key=key, value=value)
