from __future__ import annotations

import os
import threading
from typing import Any

import requests
from loguru import logger
from pydantic.alias_generators import to_camel

from family_tree.schemas.members import FamilyMemberResponse

API_BASE = os.getenv("FAMILY_TREE_API_BASE_URL", "http://localhost:8000").rstrip("/")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("FAMILY_TREE_HTTP_TIMEOUT_SECONDS", "20"))

MEMBERS_RESOURCE = "members"


class ApiError(Exception):
    """A non-success response (or transport failure) from the family API."""

    def __init__(self, message: str, status_code: int | None = None, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field = field


class StaleResponseError(Exception):
    """The response belongs to a request that a newer one for the same resource superseded."""


class RequestTracker:
    """Hands out per-resource generations so only the latest response is applied."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}

    def begin(self, resource: str) -> int:
        with self._lock:
            generation = self._generations.get(resource, 0) + 1
            self._generations[resource] = generation
            return generation

    def is_current(self, resource: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(resource) == generation


class FamilyApiClient:
    """
    Thin client for the ``/api/family`` endpoints.

    ``session`` can be anything with a requests-style ``request`` method, which lets
    tests pass FastAPI's ``TestClient``.
    """

    def __init__(
        self,
        base_url: str = API_BASE,
        session: Any | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        tracker: RequestTracker | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.tracker = tracker or RequestTracker()

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("{method} {path} failed: {error}", method=method, path=path, error=exc)
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 204:
            return None

        try:
            parsed = response.json()
        except ValueError:
            parsed = {"message": response.text}

        if not 200 <= response.status_code < 300:
            message = parsed.get("message") if isinstance(parsed, dict) else None
            field = parsed.get("field") if isinstance(parsed, dict) else None
            logger.warning(
                "{method} {path} returned {status}: {message}",
                method=method,
                path=path,
                status=response.status_code,
                message=message,
            )
            raise ApiError(message or f"Request failed ({response.status_code})", response.status_code, field)
        return parsed

    def list_members(self) -> list[FamilyMemberResponse]:
        generation = self.tracker.begin(MEMBERS_RESOURCE)
        rows = self._request("GET", "/api/family")
        if not self.tracker.is_current(MEMBERS_RESOURCE, generation):
            raise StaleResponseError(MEMBERS_RESOURCE)
        return [FamilyMemberResponse.model_validate(row) for row in rows]

    def get_member(self, member_id: int) -> FamilyMemberResponse | None:
        try:
            row = self._request("GET", f"/api/family/{member_id}")
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        return FamilyMemberResponse.model_validate(row)

    def create_member(self, **fields: Any) -> FamilyMemberResponse:
        row = self._request("POST", "/api/family", _to_wire(fields))
        return FamilyMemberResponse.model_validate(row)

    def update_member(self, member_id: int, **fields: Any) -> FamilyMemberResponse:
        row = self._request("PUT", f"/api/family/{member_id}", _to_wire(fields))
        return FamilyMemberResponse.model_validate(row)

    def delete_member(self, member_id: int) -> None:
        self._request("DELETE", f"/api/family/{member_id}")

    def add_parent(self, member_id: int, **fields: Any) -> tuple[FamilyMemberResponse, FamilyMemberResponse]:
        body = self._request("POST", f"/api/family/{member_id}/parent", _to_wire(fields))
        return (
            FamilyMemberResponse.model_validate(body["parent"]),
            FamilyMemberResponse.model_validate(body["member"]),
        )

    def swap_members(self, id1: int, id2: int) -> tuple[FamilyMemberResponse, FamilyMemberResponse]:
        body = self._request("POST", "/api/family/swap", {"id1": id1, "id2": id2})
        return (
            FamilyMemberResponse.model_validate(body["member1"]),
            FamilyMemberResponse.model_validate(body["member2"]),
        )


def _to_wire(fields: dict[str, Any]) -> dict[str, Any]:
    return {to_camel(key): value for key, value in fields.items()}
