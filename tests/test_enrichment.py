"""Tests for per-image face detection."""

import pytest
from conftest import FakeDetector, make_upload

from face_track.errors import UpstreamError
from face_track.models import BoundingBox, DetectedFace
from face_track.processing.enrichment import detect_image_faces, to_face


def test_to_face_rounds_mean_age():
    detected = DetectedFace(gender="female", age_mean=33.7, bbox=BoundingBox(5, 6, 7, 8))
    face = to_face(9, detected)
    assert face.image_id == 9
    assert face.gender == "female"
    assert face.age == 34
    assert face.bbox == BoundingBox(height=5, width=6, x=7, y=8)


def test_detect_image_faces(lifecycle, store):
    task_id = lifecycle.create_task()
    image = lifecycle.attach_image(task_id, make_upload("a.jpg"))
    detector = FakeDetector(faces_per_call=3)

    faces = detect_image_faces(image, "token", store, detector)

    assert detector.calls == [store.read_image_bytes(image)]
    assert [f.image_id for f in faces] == [image.id] * 3
    assert [f.gender for f in faces] == ["male", "female", "male"]
    assert [f.age for f in faces] == [30, 31, 32]


def test_detect_image_faces_propagates_errors(lifecycle, store):
    task_id = lifecycle.create_task()
    image = lifecycle.attach_image(task_id, make_upload("a.jpg"))
    detector = FakeDetector()
    detector.failing.add(store.read_image_bytes(image))

    with pytest.raises(UpstreamError):
        detect_image_faces(image, "token", store, detector)
