"""Capabilities the task core needs from its collaborators."""

from typing import Protocol

from PIL import Image as PILImage

from face_track.models import DetectedFace, Face, Image, Task, TaskStatus


class DetectionGateway(Protocol):
    """External face detection service."""

    def login(self) -> str:
        """Obtain an access token. Raise UpstreamError on failure."""
        ...

    def detect(self, image_data: bytes, token: str) -> list[DetectedFace]:
        """Detect faces on one JPEG image. Raise UpstreamError on failure."""
        ...


class TaskStore(Protocol):
    """Persistence of tasks, images, faces and image files.

    Lookups of a missing task raise NotFoundError; database failures raise
    PersistenceError.
    """

    def create_task(self) -> int: ...

    def load_task(self, task_id: int) -> Task: ...

    def load_images(self, task_id: int) -> list[Image]: ...

    def load_faces(self, image_ids: list[int]) -> dict[int, list[Face]]: ...

    def delete_task(self, task_id: int) -> None: ...

    def delete_task_files(self, task_id: int) -> None: ...

    def image_name_exists(self, task_id: int, name: str) -> bool: ...

    def decode_image_file(self, data: bytes) -> PILImage.Image: ...

    def save_image_file(self, task_id: int, name: str, img: PILImage.Image) -> str: ...

    def remove_image_file(self, image: Image) -> None: ...

    def create_image_record(self, image: Image) -> Image: ...

    def read_image_bytes(self, image: Image) -> bytes: ...

    def set_task_status(self, task_id: int, status: TaskStatus) -> None: ...

    def persist_faces_and_done_flags(self, faces: list[Face], images: list[Image]) -> set[int]:
        """Store faces and set done=true per image; return IDs of images that could not be stored."""
        ...

    def persist_statistics(self, task: Task) -> None: ...
