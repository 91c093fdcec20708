"""Xen Orchestra REST API client listing VMs."""
from typing import List, Optional
import logging

import httpx
from pydantic import ValidationError

from xo_sd.config import XoConfig
from xo_sd.models import VmRecord

logger = logging.getLogger(__name__)

VM_FIELDS = "name_label,tags,mainIpAddress"


class DirectoryError(Exception):
    """Raised when the VM list cannot be fetched or decoded."""


class XoClient:
    """Fetches VM records from the Xen Orchestra REST API."""

    def __init__(self, config: XoConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.

        Args:
            config: XO connection settings (token must already be resolved)
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.config = config
        self.transport = transport

    @property
    def vms_url(self) -> str:
        return f"{self.config.url}/rest/v0/vms"

    async def get_vms(self) -> List[VmRecord]:
        """List all VMs with their name, tags and main IP address."""
        logger.debug(f"Requesting VMs from XOA: {self.vms_url}")

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_s,
                verify=self.config.verify_tls,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    self.vms_url,
                    params={"fields": VM_FIELDS},
                    headers={"Cookie": f"authenticationToken={self.config.token}"},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise DirectoryError(
                f"XOA answered {e.response.status_code} for {self.vms_url}"
            ) from e
        except httpx.HTTPError as e:
            raise DirectoryError(f"Failed to reach XOA at {self.vms_url}: {e}") from e
        except ValueError as e:
            raise DirectoryError(f"XOA returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise DirectoryError(
                f"Expected a list of VMs from XOA, got {type(payload).__name__}"
            )

        try:
            vms = [VmRecord.model_validate(item) for item in payload]
        except ValidationError as e:
            raise DirectoryError(f"Unexpected VM record from XOA: {e}") from e

        logger.debug(f"Received {len(vms)} VMs from XOA")
        return vms
