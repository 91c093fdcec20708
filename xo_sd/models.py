"""Data structures for VM records, tag directives and SD targets."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class VmRecord(BaseModel):
    """A VM as listed by the Xen Orchestra REST API."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(alias="name_label")
    tags: List[str] = Field(default_factory=list)
    address: Optional[str] = Field(default=None, alias="mainIpAddress")

    @property
    def has_address(self) -> bool:
        return bool(self.address)


@dataclass(frozen=True)
class GlobalLabel:
    """Label applied to every job of a VM (`prom::key=value`)."""
    key: str
    value: str


@dataclass(frozen=True)
class JobLabel:
    """Label scoped to a single job (`prom:job:key=value`)."""
    job: str
    key: str
    value: str


@dataclass(frozen=True)
class JobAddress:
    """Scrape address suffix for a job (`prom:job:job=port`)."""
    job: str
    value: str


TagDirective = Union[GlobalLabel, JobLabel, JobAddress]


@dataclass
class Target:
    """One Prometheus HTTP SD target group contributed by one VM."""
    targets: List[str] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {"targets": list(self.targets), "labels": dict(self.labels)}


EndpointRegistry = Dict[str, List[Target]]
