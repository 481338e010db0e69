"""
Endpoint registry: the fixed default endpoint plus an optional operator URL.
"""
import ipaddress
import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from core.types import Endpoint

logger = logging.getLogger(__name__)

# Registered names and IPv4 literals; IPv6 literals are checked separately
_HOST_NAME = re.compile(r"^[A-Za-z0-9_~-]+(?:\.[A-Za-z0-9_~-]+)*\.?$")


def _valid_host(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    return bool(_HOST_NAME.match(host))


def extract_host(url: str) -> Optional[str]:
    """Host part of `url`, or None if it is not an absolute URL with a valid host and port."""
    try:
        parsed = urlparse((url or "").strip())
        host = parsed.hostname
        # raises ValueError for a non-numeric or out-of-range port
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not host or not _valid_host(host):
        return None
    return host


def register(default: str, extra: Optional[str] = None) -> List[Endpoint]:
    """
    Build the endpoint list: `default` first, then `extra` when it is a valid
    URL. Duplicates are kept; each entry gets its own index.
    """
    endpoints: List[Endpoint] = []
    candidates = [default]
    extra = (extra or "").strip()
    if extra:
        candidates.append(extra)
    else:
        logger.info("SOLANA_RPC_URL is not set; testing the default endpoint only.")

    for url in candidates:
        host = extract_host(url)
        if host is None:
            logger.warning("Invalid RPC URL, skipping: %s", url)
            continue
        endpoints.append(Endpoint(index=len(endpoints), url=url.strip(), host=host))
    return endpoints
