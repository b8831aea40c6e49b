"""HTTP session shared by the MapQuest elevation and geocoding clients.

Both services only refine a trail: it is built with the recorded elevation
and without countries when they are unreachable. A failing request is
therefore retried once with a short backoff, so that a service outage costs
a trail build about a second rather than stalling the batch.
"""

from __future__ import annotations

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import config

__all__ = ["create_default_session", "get_default_session"]

# Elevation profiles are POSTed, reverse geocoding uses GET.
_RETRIED_METHODS = frozenset({"GET", "POST"})
_RETRIED_STATUSES = (500, 502, 503, 504)


def _mapquest_retry() -> Retry:
    return Retry(
        total=config.MAPQUEST_RETRIES,
        backoff_factor=config.MAPQUEST_RETRY_BACKOFF,
        status_forcelist=_RETRIED_STATUSES,
        allowed_methods=_RETRIED_METHODS,
        raise_on_status=False,
    )


def create_default_session() -> Session:
    """Build a pooled session for the MapQuest endpoints."""

    adapter = HTTPAdapter(
        pool_connections=config.HTTP_POOL_CONNECTIONS,
        pool_maxsize=config.HTTP_POOL_MAXSIZE,
        max_retries=_mapquest_retry(),
    )
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": config.HTTP_USER_AGENT,
        }
    )
    return session


_DEFAULT_SESSION = create_default_session()


def get_default_session() -> Session:
    return _DEFAULT_SESSION
