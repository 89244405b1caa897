"""DuckDB + filesystem implementation of the task store."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import duckdb
from PIL import Image as PILImage

from face_track.errors import InvalidStateError, NotFoundError, PersistenceError
from face_track.models import Face, Image, Task, TaskStatus
from face_track.store import files, repository

logger = logging.getLogger(__name__)


class DuckDBTaskStore:
    """Task store backed by one DuckDB connection and an image folder.

    Every call works on its own cursor, so a processing run in a background
    thread can share the connection with the caller.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection, images_dir: Path) -> None:
        self.conn = conn
        self.images_dir = images_dir

    @contextmanager
    def _cursor(self) -> Iterator[duckdb.DuckDBPyConnection]:
        try:
            with self.conn.cursor() as cur:
                yield cur
        except duckdb.Error as e:
            raise PersistenceError(str(e)) from e

    # -- tasks ---------------------------------------------------------------

    def create_task(self) -> int:
        with self._cursor() as cur:
            return repository.insert_task(cur)

    def load_task(self, task_id: int) -> Task:
        with self._cursor() as cur:
            task = repository.get_task(cur, task_id)
        if task is None:
            raise NotFoundError(f"task {task_id} not found")
        return task

    def set_task_status(self, task_id: int, status: TaskStatus) -> None:
        with self._cursor() as cur:
            found = repository.update_task_status(cur, task_id, status)
        if not found:
            raise NotFoundError(f"task {task_id} not found")

    def persist_statistics(self, task: Task) -> None:
        with self._cursor() as cur:
            found = repository.update_task_statistics(
                cur, task.id, task.status, task.statistics
            )
        if not found:
            raise NotFoundError(f"task {task.id} not found")

    def delete_task(self, task_id: int) -> None:
        with self._cursor() as cur:
            cur.begin()
            try:
                found = repository.delete_task(cur, task_id)
            except duckdb.Error:
                cur.rollback()
                raise
            if not found:
                cur.rollback()
                raise NotFoundError(f"task {task_id} not found")
            cur.commit()

    def delete_task_files(self, task_id: int) -> None:
        files.remove_task_dir(self.images_dir, task_id)

    # -- images --------------------------------------------------------------

    def load_images(self, task_id: int) -> list[Image]:
        with self._cursor() as cur:
            return repository.list_images(cur, task_id)

    def image_name_exists(self, task_id: int, name: str) -> bool:
        with self._cursor() as cur:
            return repository.image_name_exists(cur, task_id, name)

    def create_image_record(self, image: Image) -> Image:
        try:
            with self._cursor() as cur:
                image.id = repository.insert_image(cur, image)
        except PersistenceError as e:
            if isinstance(e.__cause__, duckdb.ConstraintException):
                raise InvalidStateError(
                    f"image {image.name!r} already exists in task {image.task_id}"
                ) from e
            raise
        return image

    def decode_image_file(self, data: bytes) -> PILImage.Image:
        try:
            return files.decode_image(data)
        except ValueError as e:
            raise InvalidStateError(str(e)) from e

    def save_image_file(self, task_id: int, name: str, img: PILImage.Image) -> str:
        """Write the image under the task folder and return the stored file name."""
        file_name = files.unique_filename(name)
        path = files.task_dir(self.images_dir, task_id) / file_name
        try:
            files.save_image(img, path)
        except OSError as e:
            raise PersistenceError(f"cannot write {path}: {e}") from e
        return file_name

    def remove_image_file(self, image: Image) -> None:
        self.image_path(image).unlink(missing_ok=True)

    def image_path(self, image: Image) -> Path:
        return files.task_dir(self.images_dir, image.task_id) / image.file_name

    def read_image_bytes(self, image: Image) -> bytes:
        path = self.image_path(image)
        try:
            return path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"cannot read {path}: {e}") from e

    # -- faces ---------------------------------------------------------------

    def load_faces(self, image_ids: list[int]) -> dict[int, list[Face]]:
        with self._cursor() as cur:
            return repository.get_faces_by_image_ids(cur, image_ids)

    def persist_faces_and_done_flags(self, faces: list[Face], images: list[Image]) -> set[int]:
        """Store each image's faces and done flag in its own transaction.

        An image whose write fails is rolled back and reported; the other
        images stay committed.
        """
        faces_by_image: dict[int, list[Face]] = {}
        for face in faces:
            faces_by_image.setdefault(face.image_id, []).append(face)

        failed: set[int] = set()
        with self._cursor() as cur:
            for image in images:
                cur.begin()
                try:
                    repository.insert_faces(cur, faces_by_image.get(image.id, []))
                    repository.mark_image_done(cur, image.id)
                    cur.commit()
                except duckdb.Error as e:
                    logger.error("Failed to store results of image %s: %s", image.id, e)
                    cur.rollback()
                    failed.add(image.id)
        return failed
