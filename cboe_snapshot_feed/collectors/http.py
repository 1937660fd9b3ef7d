"""Plain HTTP access to the exchange pages."""

import logging

import requests

from cboe_snapshot_feed.config import Settings
from cboe_snapshot_feed.errors import NetworkError

logger = logging.getLogger(__name__)


def create_session(settings: Settings) -> requests.Session:
    """Creates the one HTTP session shared by every request of a run."""
    session = requests.Session()
    session.headers.update({"User-Agent": settings.user_agent})
    return session


def fetch(session: requests.Session, url: str, timeout: float) -> bytes:
    """
    Performs a single GET and returns the raw response body.

    No retries: any failure aborts the run.

    Raises:
        NetworkError: On transport failure, timeout or a non-success status.
    """
    logger.debug(f"GET {url}")
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e
    return response.content
