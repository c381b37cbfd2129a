"""
HTTP client for the storefront REST backend.

Wraps a requests.Session: resolves the base URL from config, attaches the
bearer token of the current session, and turns every non-2xx response or
transport failure into an ApiError carrying the backend's own message.
"""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from storefront import config
from storefront.errors import ApiError, field_errors_from_payload, message_from_payload

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error"


def _decode(response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


class ApiClient:
    """
    `session` is anything with a requests-style
    ``request(method, url, params=, json=, data=, files=, headers=)``.
    `token_getter` is called on every request so a login or logout takes
    effect immediately.
    """

    def __init__(self, base_url: Optional[str] = None, session=None,
                 token_getter: Optional[Callable[[], Optional[str]]] = None):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.token_getter = token_getter

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_getter() if self.token_getter else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None,
                json: Any = None, data: Optional[Dict[str, Any]] = None,
                files: Optional[Dict[str, Any]] = None, fallback: str = "Request failed") -> Any:
        url = f"{self.base_url}{path}"
        kwargs: Dict[str, Any] = {"headers": self._headers()}
        cleaned = _clean_params(params)
        if cleaned:
            kwargs["params"] = cleaned
        if json is not None:
            kwargs["json"] = json
        if data is not None:
            kwargs["data"] = data
        if files:
            kwargs["files"] = files

        try:
            r = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(NETWORK_ERROR) from e

        payload = _decode(r)
        if r.status_code >= 400:
            field_errors = field_errors_from_payload(payload) if r.status_code in (400, 422) else None
            raise ApiError(
                message_from_payload(payload, fallback),
                status_code=r.status_code,
                payload=payload,
                field_errors=field_errors,
            )
        return payload

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def patch(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PATCH", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)
