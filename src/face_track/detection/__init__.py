"""Face detection service clients."""

from face_track.detection.face_cloud import FaceCloudClient

__all__ = ["FaceCloudClient"]
