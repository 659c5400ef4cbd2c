"""
HTTP client for the Frame Manager backend: storage bucket and frames table
"""
import logging
import requests
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from .config import API_URL, API_KEY, FRAMES_BUCKET, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A backend call failed; message is what the user gets to see"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _validation_message(item) -> str:
    if not isinstance(item, dict):
        return str(item)
    loc = [str(part) for part in item.get("loc", []) if part != "body"]
    msg = item.get("msg", "Invalid value")
    return f"{loc[-1]}: {msg}" if loc else msg


class BackendClient:
    """
    Thin wrapper over the backend's storage and table routes.

    ``session`` can be any requests-compatible session (the tests pass a
    FastAPI TestClient).
    """

    def __init__(
        self,
        base_url: str = API_URL,
        api_key: Optional[str] = API_KEY,
        bucket: str = FRAMES_BUCKET,
        session=None,
        timeout: float = REQUEST_TIMEOUT
    ):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        if api_key:
            self.session.headers.update({"apikey": api_key})

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise BackendError(f"Cannot connect to backend at {self.base_url}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error("%s %s returned %s: %s", method, url, response.status_code, message)
            raise BackendError(message, response.status_code)
        return response

    @staticmethod
    def _error_message(response) -> str:
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            detail = None
        if isinstance(detail, str) and detail:
            return detail
        if isinstance(detail, list) and detail:
            # FastAPI validation errors: [{"loc": [...], "msg": ...}, ...]
            return "; ".join(_validation_message(item) for item in detail)
        if detail:
            return str(detail)
        return response.text or f"Backend returned HTTP {response.status_code}"

    # ---------- Storage ----------

    def upload(
        self,
        key: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = True
    ) -> Dict[str, Any]:
        """
        Store content under key in the frames bucket. With upsert=False an
        existing object is never replaced; the backend answers 409 instead.
        """
        response = self._request(
            "POST",
            f"/storage/v1/object/{self.bucket}/{quote(key)}",
            files={"file": (key, content, content_type)},
            headers={"x-upsert": "true" if upsert else "false"}
        )
        return response.json()

    def get_public_url(self, key: str) -> str:
        """Public URL of an object; built locally, no request is made"""
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    def remove(self, keys: List[str]) -> List[str]:
        """Remove objects; returns the keys that actually existed"""
        response = self._request(
            "DELETE",
            f"/storage/v1/object/{self.bucket}",
            json={"prefixes": list(keys)}
        )
        return response.json()["removed"]

    # ---------- Frames table ----------

    def select_frames(self) -> List[Dict[str, Any]]:
        """All frames, newest first"""
        response = self._request("GET", "/rest/v1/frames", params={"order": "created_at.desc"})
        return response.json()

    def insert_frame(self, row: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request("POST", "/rest/v1/frames", json=row)
        return response.json()

    def update_frame(self, frame_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request("PATCH", f"/rest/v1/frames/{quote(frame_id)}", json=fields)
        return response.json()

    def delete_frame(self, frame_id: str):
        self._request("DELETE", f"/rest/v1/frames/{quote(frame_id)}")

    def health(self) -> Dict[str, Any]:
        response = self._request("GET", "/health")
        return response.json()


def check_backend_status(client: BackendClient) -> str:
    """Check if backend is running"""
    try:
        client.health()
        return "✅ Backend is running"
    except BackendError as e:
        if e.status_code is None:
            return f"❌ Cannot connect to backend at {client.base_url}"
        return "❌ Backend returned error"
