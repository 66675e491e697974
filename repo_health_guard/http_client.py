"""Shared HTTP client handling."""

import httpx

_http_clients: dict[bool, httpx.Client] = {}


def _get_http_client(verify_ssl: bool = True) -> httpx.Client:
    """Get or create a pooled HTTP client for the given SSL verification mode.

    Recreates the client if it has been closed.
    """
    client = _http_clients.get(verify_ssl)
    if client is None or client.is_closed:
        client = httpx.Client(
            verify=verify_ssl,
            timeout=10,
            follow_redirects=True,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        _http_clients[verify_ssl] = client
    return client


def close_http_client():
    """Close all pooled HTTP clients. Call this when shutting down."""
    for client in _http_clients.values():
        if not client.is_closed:
            client.close()
    _http_clients.clear()
