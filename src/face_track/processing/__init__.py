"""Face detection runs and statistics."""

from face_track.processing.processor import TaskProcessor
from face_track.processing.statistics import compute_statistics

__all__ = ["TaskProcessor", "compute_statistics"]
