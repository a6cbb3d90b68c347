"""Host environment detection.

Determines the OS family and the address other machines on the local network
can use to reach this host. Detection never fails: when no interface address
can be found the loopback address is returned.

"""

from __future__ import annotations

import dataclasses
import platform

from handyshare_deploy.logging import get_logger, log_warning
from handyshare_deploy.process import probe

logger = get_logger(__name__)

LOOPBACK_ADDRESS = "127.0.0.1"
DARWIN = "Darwin"

# Wi-Fi first, then wired Ethernet.
_DARWIN_INTERFACES = ("en0", "en1")


@dataclasses.dataclass(frozen=True, slots=True)
class HostFacts:
    """Facts about the machine running the deployment.

    Attributes:
        os_family: ``platform.system()`` value (``Darwin``, ``Linux``, ...).
        external_ip: Primary interface address, or the loopback address.

    """

    os_family: str
    external_ip: str


def _darwin_ip() -> str | None:
    for interface in _DARWIN_INTERFACES:
        output = probe(["ipconfig", "getifaddr", interface])
        if output and output.strip():
            return output.strip()
    return None


def _hostname_ip() -> str | None:
    output = probe(["hostname", "-I"])
    if not output:
        return None
    addresses = output.split()
    return addresses[0] if addresses else None


def detect_external_ip(os_family: str) -> str:
    """Return the host's primary interface IP for the given OS family.

    macOS is queried through ``ipconfig getifaddr``; every other OS through
    ``hostname -I``. Falls back to ``127.0.0.1``.
    """
    address = _darwin_ip() if os_family == DARWIN else _hostname_ip()
    if address:
        return address

    log_warning(
        logger,
        "No interface address found on %s; using %s",
        os_family or "unknown OS",
        LOOPBACK_ADDRESS,
    )
    return LOOPBACK_ADDRESS


def detect_host_facts(os_family: str | None = None) -> HostFacts:
    """Detect the OS family and external IP of this host."""
    family = os_family if os_family is not None else platform.system()
    return HostFacts(os_family=family, external_ip=detect_external_ip(family))
