"""Public IP discovery via redundant lookup services."""

from collections.abc import Sequence

import httpx

from ..exceptions import ResolutionError
from ..logging_config import get_logger

logger = get_logger(__name__)

IP_SERVICES: tuple[str, ...] = (
    "https://api.ipify.org",
    "https://ifconfig.me/ip",
    "https://icanhazip.com",
)

DEFAULT_TIMEOUT = 5.0


def resolve_public_address(
    services: Sequence[str] = IP_SERVICES,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Return this host's public IP as reported by the first responsive service.

    Services are tried in order; a transport error, non-200 status or empty
    body moves on to the next one.

    Raises:
        ResolutionError: If every service failed.
    """
    with httpx.Client(timeout=timeout) as client:
        for service in services:
            try:
                resp = client.get(service)
            except httpx.HTTPError as e:
                logger.warning(
                    "public_ip_lookup_failed",
                    service=service,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if resp.status_code != httpx.codes.OK:
                logger.warning(
                    "public_ip_lookup_bad_status",
                    service=service,
                    status_code=resp.status_code,
                )
                continue

            ip = resp.text.strip()
            if not ip:
                logger.warning("public_ip_lookup_empty_body", service=service)
                continue

            logger.info("public_ip_detected", ip=ip, service=service)
            return ip

    raise ResolutionError("failed to detect public IP from any service")
