"""Reachability probe for a SPARQL endpoint."""

from __future__ import annotations

import logging

import requests

from schemagov.sparql_helper import USER_AGENT, MimeTypes

logger = logging.getLogger(__name__)


def check_health(endpoint: str, timeout: float = 5) -> dict[str, str]:
    """Ping *endpoint* with ``ASK {}`` and report its status."""
    try:
        resp = requests.get(
            endpoint,
            params={"query": "ASK {}", "format": "json"},
            headers={"Accept": MimeTypes.JSON, "User-Agent": USER_AGENT},
            timeout=timeout,
        )
        status = "ok" if resp.ok else f"http_{resp.status_code}"
    except requests.exceptions.Timeout:
        status = "timeout"
    except requests.exceptions.ConnectionError:
        status = "unreachable"
    except requests.exceptions.RequestException as exc:
        status = f"error: {str(exc)[:80]}"

    logger.debug("Health of %s: %s", endpoint, status)
    return {"endpoint": endpoint, "status": status}
