"""
Small HTTP client for scripts that talk to a running Wichtelaktion API.

Every call returns an ``ApiResult``. Expected failures (4xx, 5xx, connection
problems) become ``ok=False`` results carrying the status code and the
server's error message instead of exceptions.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

logger = logging.getLogger("app.client")

DEFAULT_TIMEOUT = 15


@dataclass
class ApiResult:
    ok: bool
    status_code: int
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, status_code: int, data: Any) -> "ApiResult":
        return cls(ok=True, status_code=status_code, data=data)

    @classmethod
    def failure(cls, status_code: int, error: str) -> "ApiResult":
        return cls(ok=False, status_code=status_code, error=error)


class WichtelClient:
    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        })

    def _request(self, method: str, endpoint: str, **kwargs) -> ApiResult:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {endpoint} failed: {e}")
            # status 0: no response from the server
            return ApiResult.failure(0, str(e))

        try:
            body = response.json()
        except ValueError:
            body = None

        if 200 <= response.status_code < 300:
            return ApiResult.success(response.status_code, body)

        if isinstance(body, dict) and body.get("error"):
            message = str(body["error"])
        else:
            message = response.text or response.reason or "Request failed"
        logger.info(f"{method} {endpoint} -> {response.status_code}: {message}")
        return ApiResult.failure(response.status_code, message)

    # Users
    def me(self) -> ApiResult:
        return self._request("GET", "/api/users/me")

    def sync_profile(self) -> ApiResult:
        return self._request("POST", "/api/users")

    def list_users(self, page: int = 1, limit: Optional[int] = None) -> ApiResult:
        return self._request("GET", "/api/users", params=_page_params(page, limit))

    def set_role(self, user_id: str, role: str) -> ApiResult:
        return self._request("PUT", f"/api/users/{user_id}/role", json={"role": role})

    # Classes
    def list_classes(self, page: int = 1, limit: Optional[int] = None) -> ApiResult:
        return self._request("GET", "/api/classes", params=_page_params(page, limit))

    def create_class(self, name: str) -> ApiResult:
        return self._request("POST", "/api/classes", json={"name": name})

    # Events
    def list_events(self) -> ApiResult:
        return self._request("GET", "/api/events")

    def get_event(self, event_id: str) -> ApiResult:
        return self._request("GET", f"/api/events/{event_id}")

    def create_event(self, **fields) -> ApiResult:
        return self._request("POST", "/api/events", json=fields)

    def update_event(self, event_id: str, **fields) -> ApiResult:
        return self._request("PUT", f"/api/events/{event_id}", json=fields)

    def patch_event(self, event_id: str, **fields) -> ApiResult:
        return self._request("PATCH", f"/api/events/{event_id}", json=fields)

    def delete_event(self, event_id: str) -> ApiResult:
        return self._request("DELETE", f"/api/events/{event_id}")

    # Participants
    def register(self, class_id: str, interests: Optional[str] = None,
                 event_id: Optional[str] = None) -> ApiResult:
        payload = {"class_id": class_id, "interests": interests}
        if event_id:
            payload["event_id"] = event_id
        return self._request("POST", "/api/register", json=payload)

    def list_participants(self, event_id: Optional[str] = None, page: int = 1,
                          limit: Optional[int] = None) -> ApiResult:
        params = _page_params(page, limit)
        if event_id:
            params["event_id"] = event_id
        return self._request("GET", "/api/participants", params=params)

    # Assignments
    def get_assignments(self, event_id: Optional[str] = None) -> ApiResult:
        return self._request("GET", "/api/assignments", params=_event_param(event_id))

    def create_assignments(self, event_id: Optional[str] = None) -> ApiResult:
        return self._request("POST", "/api/assignments", json={"event_id": event_id})

    # Presents
    def get_presents(self, event_id: Optional[str] = None) -> ApiResult:
        return self._request("GET", "/api/presents", params=_event_param(event_id))

    def mark_submitted(self, participant_id: str, description: Optional[str] = None) -> ApiResult:
        return self._request("POST", "/api/presents", json={
            "action": "mark_submitted",
            "participant_id": participant_id,
            "description": description,
        })

    def mark_delivered(self, participant_id: str) -> ApiResult:
        return self._request("POST", "/api/presents", json={
            "action": "mark_delivered",
            "participant_id": participant_id,
        })

    def update_present_description(self, present_id: str, description: Optional[str]) -> ApiResult:
        return self._request("POST", "/api/presents", json={
            "action": "update_description",
            "present_id": present_id,
            "description": description,
        })

    def patch_present(self, present_id: str, status: Optional[str] = None,
                      description: Optional[str] = None) -> ApiResult:
        payload = {"present_id": present_id}
        if status is not None:
            payload["status"] = status
        if description is not None:
            payload["description"] = description
        return self._request("PATCH", "/api/presents", json=payload)

    # Statistics
    def statistics(self, event_id: Optional[str] = None, days: Optional[int] = None) -> ApiResult:
        params = _event_param(event_id)
        if days:
            params["days"] = days
        return self._request("GET", "/api/statistics", params=params)


def _page_params(page: int, limit: Optional[int]) -> dict:
    params = {"page": page}
    if limit:
        params["limit"] = limit
    return params


def _event_param(event_id: Optional[str]) -> dict:
    return {"event_id": event_id} if event_id else {}
