"""Validation and parsing utilities for URL shortener."""

import ipaddress
import re
from typing import Optional, Tuple


HREF_PATTERN = re.compile(r"""href=['"]([^'"]+)['"]""")


def extract_url_from_html(body: str) -> Optional[str]:
    """Return the first href target in an HTML snippet, or None."""
    match = HREF_PATTERN.search(body)
    if match:
        return match.group(1)
    return None


def is_valid_original_url(url: str) -> Tuple[bool, str]:
    """Validate a URL submitted for shortening.
    
    Only emptiness is rejected; well-formedness is not checked.
    
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(url, str) or not url.strip():
        return False, "URL is required"
    return True, ""


def is_ip_in_subnet(ip: str, subnet: str) -> bool:
    """Check whether ip lies in the CIDR subnet.
    
    Malformed addresses or subnets are treated as "not in subnet".
    """
    if not ip or not subnet:
        return False
    try:
        network = ipaddress.ip_network(subnet, strict=False)
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return False
    return address in network
