"""
Incident API Client
===================

Thin synchronous client for the incident HTTP API.

Errors from the server are raised as IncidentClientError carrying the
status code, the server message and (for validation failures) the
per-field reasons, so a form can show them next to each input.
Nothing is retried; the caller decides whether to try again.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import httpx
from httpx import HTTPError, TimeoutException

from incidentdesk.client.state import ListState
from incidentdesk.core.config import settings
from incidentdesk.core.logging import get_logger
from incidentdesk.core.query.list_query import Pagination

logger = get_logger(__name__)

INCIDENTS_PATH = "/api/incidents"


class IncidentClientError(Exception):
    """Raised when a request fails or the server answers with an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, str]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    @property
    def is_validation_error(self) -> bool:
        return self.status_code == 400 and bool(self.details)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


@dataclass(frozen=True)
class IncidentPage:
    incidents: list[dict]
    pagination: Pagination

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> "IncidentPage":
        meta = data["pagination"]
        return cls(
            incidents=list(data["incidents"]),
            pagination=Pagination(
                page=meta["page"],
                limit=meta["limit"],
                total=meta["total"],
                total_pages=meta["totalPages"],
                has_next_page=meta["hasNextPage"],
                has_prev_page=meta["hasPrevPage"],
            ),
        )


class IncidentClient:
    """
    HTTP client for the incident API.

    Usage:
        with IncidentClient("http://localhost:3001") as client:
            page = client.fetch_incidents(ListState(service="Database"))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            base_url: API root, defaults to CLIENT_BASE_URL
            timeout: Per-request timeout in seconds, defaults to CLIENT_TIMEOUT
            transport: Optional httpx transport (e.g. for in-process testing)
            http_client: Pre-built httpx client; overrides the other arguments
        """
        self._http = http_client or httpx.Client(
            base_url=base_url or settings.CLIENT_BASE_URL,
            timeout=timeout or settings.CLIENT_TIMEOUT,
            transport=transport,
        )

    def __enter__(self) -> "IncidentClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # =====================================
    # Operations
    # =====================================

    def fetch_incidents(
        self,
        params: Union[ListState, Mapping[str, Any], None] = None,
    ) -> IncidentPage:
        """
        Fetch one page of incidents.

        Args:
            params: A ListState, or a mapping of raw query parameters

        Returns:
            IncidentPage with records and pagination metadata
        """
        if isinstance(params, ListState):
            query = params.to_query_params()
        else:
            query = {key: value for key, value in (params or {}).items() if value not in (None, "")}
        return IncidentPage.from_response(self._request("GET", INCIDENTS_PATH, params=query))

    def fetch_incident(self, incident_id: str) -> dict:
        return self._request("GET", f"{INCIDENTS_PATH}/{incident_id}")

    def create_incident(self, data: Mapping[str, Any]) -> dict:
        return self._request("POST", INCIDENTS_PATH, json=dict(data))

    def update_incident(self, incident_id: str, data: Mapping[str, Any]) -> dict:
        return self._request("PATCH", f"{INCIDENTS_PATH}/{incident_id}", json=dict(data))

    def health(self) -> dict:
        return self._request("GET", "/health")

    # =====================================
    # Transport
    # =====================================

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, path, **kwargs)
        except TimeoutException as e:
            logger.warning("incident_api_timeout", method=method, path=path)
            raise IncidentClientError("Request timed out") from e
        except HTTPError as e:
            logger.error("incident_api_transport_error", method=method, path=path, error=str(e))
            raise IncidentClientError(f"Request failed: {e}") from e

        if response.is_error:
            raise self._error_from(response)
        return response.json()

    @staticmethod
    def _error_from(response: httpx.Response) -> IncidentClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("error") or f"Request failed with status {response.status_code}"
        logger.debug(
            "incident_api_error_response",
            status_code=response.status_code,
            message=message,
        )
        return IncidentClientError(
            message,
            status_code=response.status_code,
            details=body.get("details"),
        )
