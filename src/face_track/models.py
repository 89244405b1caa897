"""Data models for tasks, images and detected faces."""

from dataclasses import dataclass, field
from enum import StrEnum


class TaskStatus(StrEnum):
    """Lifecycle status of a task."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class BoundingBox:
    """Face bounding box in pixel units."""

    height: int
    width: int
    x: int
    y: int


@dataclass(frozen=True)
class Face:
    """A single detected face within an image."""

    image_id: int
    gender: str
    age: int
    bbox: BoundingBox
    id: int | None = None


@dataclass
class Image:
    """An image attached to a task."""

    id: int | None
    task_id: int
    name: str
    file_name: str
    done: bool = False
    faces: list[Face] = field(default_factory=list)


@dataclass(frozen=True)
class Statistics:
    """Aggregated face statistics of a task."""

    faces_total: int = 0
    faces_male: int = 0
    faces_female: int = 0
    age_male_avg: int = 0
    age_female_avg: int = 0


@dataclass
class Task:
    """A batch of images analysed together."""

    id: int
    status: TaskStatus
    statistics: Statistics = field(default_factory=Statistics)
    images: list[Image] = field(default_factory=list)


@dataclass(frozen=True)
class DetectedFace:
    """One face as returned by the detection service, before it is mapped to a Face."""

    gender: str
    age_mean: float
    bbox: BoundingBox


@dataclass(frozen=True)
class UploadedImage:
    """An image upload as received from the trigger boundary."""

    name: str
    content_type: str
    data: bytes
