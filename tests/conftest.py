"""Shared test fixtures."""

import threading
import time
from io import BytesIO

import duckdb
import pytest
from PIL import Image as PILImage

from face_track.errors import UpstreamError
from face_track.lifecycle import TaskLifecycle
from face_track.models import BoundingBox, DetectedFace, Face, UploadedImage
from face_track.processing import TaskProcessor
from face_track.store import DuckDBTaskStore
from face_track.store.schema import ensure_schema


@pytest.fixture
def db_conn():
    """In-memory DuckDB connection with schema initialized."""
    conn = duckdb.connect(":memory:")
    ensure_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def store(db_conn, tmp_path) -> DuckDBTaskStore:
    """Task store writing images below a temporary folder."""
    return DuckDBTaskStore(db_conn, tmp_path / "images")


@pytest.fixture
def detector() -> "FakeDetector":
    return FakeDetector()


@pytest.fixture
def processor(store, detector) -> TaskProcessor:
    return TaskProcessor(store, detector)


@pytest.fixture
def lifecycle(store, processor) -> TaskLifecycle:
    return TaskLifecycle(store, processor)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


def make_jpeg(color: tuple[int, int, int] = (200, 120, 80), size: int = 16) -> bytes:
    """Encode a small solid-color JPEG."""
    buf = BytesIO()
    PILImage.new("RGB", (size, size), color).save(buf, format="JPEG")
    return buf.getvalue()


def make_upload(name: str, data: bytes | None = None) -> UploadedImage:
    return UploadedImage(name=name, content_type="image/jpeg", data=data or make_jpeg())


def make_face(image_id: int, gender: str, age: int) -> Face:
    return Face(image_id=image_id, gender=gender, age=age, bbox=BoundingBox(10, 8, 1, 2))


class FakeDetector:
    """Thread-safe stand-in for the Face Cloud client.

    Returns ``faces_per_call`` faces per image, fails for images whose bytes
    are listed in ``failing``, and records the peak number of concurrent
    detect calls.
    """

    def __init__(self, faces_per_call: int = 1, delay: float = 0.0) -> None:
        self.faces_per_call = faces_per_call
        self.delay = delay
        self.failing: set[bytes] = set()
        self.login_error: Exception | None = None
        self.logins = 0
        self.calls: list[bytes] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    def login(self) -> str:
        self.logins += 1
        if self.login_error is not None:
            raise self.login_error
        return "token"

    def detect(self, image_data: bytes, token: str) -> list[DetectedFace]:
        assert token == "token"
        with self._lock:
            self.calls.append(image_data)
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if image_data in self.failing:
                raise UpstreamError("detect failed")
            return [
                DetectedFace(
                    gender="male" if i % 2 == 0 else "female",
                    age_mean=30.4 + i,
                    bbox=BoundingBox(height=50, width=40, x=i, y=i),
                )
                for i in range(self.faces_per_call)
            ]
        finally:
            with self._lock:
                self.in_flight -= 1
