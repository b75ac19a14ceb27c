"""Request metadata helpers."""


def get_client_ip(forwarded_for: str | None, client_host: str | None) -> str | None:
    """Extract client IP from X-Forwarded-For header or client host.

    Args:
        forwarded_for: Value of X-Forwarded-For header (may contain multiple IPs)
        client_host: Direct client host from the connection

    Returns:
        The client IP address (first IP from X-Forwarded-For, or client host)
    """
    if forwarded_for:
        # First entry is the original client, the rest are proxies
        return forwarded_for.split(",")[0].strip()
    return client_host
