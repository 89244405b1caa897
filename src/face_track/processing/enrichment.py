"""Run one image through face detection."""

from face_track.gateways import DetectionGateway, TaskStore
from face_track.models import DetectedFace, Face, Image


def detect_image_faces(
    image: Image,
    token: str,
    store: TaskStore,
    detector: DetectionGateway,
) -> list[Face]:
    """Submit the stored image to the detector and map the response to Face records.

    Errors from reading the file or from the detector propagate unchanged.
    """
    data = store.read_image_bytes(image)
    detected = detector.detect(data, token)
    return [to_face(image.id, item) for item in detected]


def to_face(image_id: int, detected: DetectedFace) -> Face:
    """Map a detection entry to a Face of the given image."""
    return Face(
        image_id=image_id,
        gender=detected.gender,
        age=round(detected.age_mean),
        bbox=detected.bbox,
    )
