"""Face Cloud REST API client."""

import httpx

from face_track.config import (
    FACE_CLOUD_API_PASS,
    FACE_CLOUD_API_URL,
    FACE_CLOUD_API_USER,
    FACE_CLOUD_TIMEOUT,
)
from face_track.errors import UpstreamError
from face_track.models import BoundingBox, DetectedFace


class FaceCloudClient:
    """Client for the Face Cloud detection API.

    Each call is a single attempt with a fixed timeout; failures surface as
    UpstreamError.
    """

    def __init__(
        self,
        api_url: str | None = None,
        user: str | None = None,
        password: str | None = None,
        timeout: int = FACE_CLOUD_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = (api_url or FACE_CLOUD_API_URL).rstrip("/")
        self.user = user or FACE_CLOUD_API_USER
        self.password = password or FACE_CLOUD_API_PASS
        if not (self.api_url and self.user and self.password):
            raise ValueError(
                "Face Cloud URL and credentials are required. Set FACE_CLOUD__API_URL, "
                "FACE_CLOUD__API_USER and FACE_CLOUD__API_PASS in .env file."
            )
        self.timeout = timeout
        self.transport = transport

    def _post(self, path: str, **kwargs) -> dict:
        """POST to the API and return the parsed JSON body."""
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(f"{self.api_url}{path}", **kwargs)
                resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Face Cloud {path} returned status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Face Cloud {path} request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Face Cloud {path} returned invalid JSON") from e

    def login(self) -> str:
        """Log in and return the JWT access token."""
        data = self._post("/login", json={"email": self.user, "password": self.password})
        try:
            return data["data"]["access_token"]
        except (KeyError, TypeError) as e:
            raise UpstreamError(f"Face Cloud login response has no access token: {data}") from e

    def detect(self, image_data: bytes, token: str) -> list[DetectedFace]:
        """Detect faces with demographics on a JPEG image."""
        data = self._post(
            "/detect",
            params={"demographics": "true"},
            content=image_data,
            headers={"Content-Type": "image/jpeg", "Authorization": f"Bearer {token}"},
        )
        try:
            return [parse_detected_face(item) for item in data.get("data") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Face Cloud detect response is malformed: {e}") from e


def parse_detected_face(item: dict) -> DetectedFace:
    """Build a DetectedFace from one entry of the detect response ``data`` list."""
    bbox = item["bbox"]
    demographics = item["demographics"]
    return DetectedFace(
        gender=demographics.get("gender") or "",
        age_mean=float(demographics["age"]["mean"]),
        bbox=BoundingBox(
            height=int(bbox["height"]),
            width=int(bbox["width"]),
            x=int(bbox["x"]),
            y=int(bbox["y"]),
        ),
    )
