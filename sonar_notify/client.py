"""SonarQube API client.

Usage:
    client = SonarClient(url="https://sonar.example.com", token="squ_xxx")
    data   = client.get("/api/measures/component", {"component": "my-project"})

Proxies are taken from the environment (``HTTPS_PROXY``, ``NO_PROXY``...)
as requests does by default.
"""

import logging
from typing import Any

import requests

from sonar_notify.errors import (
    AuthenticationError,
    DecodeError,
    NetworkError,
    NotFoundError,
    SonarClientError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class SonarClient:
    """Thin wrapper around the SonarQube REST API."""

    def __init__(self, url: str, token: str = "", timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        # SonarQube auth: token as username, empty password
        if token:
            self._session.auth = (token, "")

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict:
        """Perform a single GET request and return the parsed JSON response.

        Raises:
            AuthenticationError: HTTP 401
            NotFoundError:       HTTP 404
            SonarClientError:    Any other non-2xx response
            NetworkError:        Timeout, connection failure or bad URL
            DecodeError:         Response body is not JSON
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(url, params=params or {}, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach SonarQube server at '{self.base_url}'"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Invalid SonarQube request to '{url}'") from exc

        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed — check that sonar_token is valid and not expired."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Resource not found: {url}")
        if not response.ok:
            raise SonarClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"SonarQube returned invalid JSON from {url}") from exc
