"""Short URL assembly."""


def build_short_url(short_id: str, base_url: str, path_prefix: str = "") -> str:
    """Join base_url, an optional path prefix and short_id with single slashes."""
    parts = [base_url.rstrip("/")]
    if path_prefix.strip("/"):
        parts.append(path_prefix.strip("/"))
    parts.append(short_id)
    return "/".join(parts)
