"""Task lifecycle: creation, image upload, deletion and processing triggers.

Status transitions::

    new -> in_progress -> completed
                       -> error -> in_progress (manual re-trigger)

``completed`` is final. A task cannot be deleted while ``in_progress`` and
only accepts images while ``new``.
"""

import logging
import threading

from face_track.config import ACCEPTED_CONTENT_TYPE
from face_track.errors import InvalidStateError, PersistenceError
from face_track.gateways import TaskStore
from face_track.models import Image, Task, TaskStatus, UploadedImage
from face_track.processing.loading import load_full_task
from face_track.processing.processor import TaskProcessor

logger = logging.getLogger(__name__)


def can_start_processing(status: TaskStatus) -> bool:
    """Whether a processing trigger moves a task in this status to in_progress."""
    match status:
        case TaskStatus.NEW | TaskStatus.ERROR:
            return True
        case TaskStatus.IN_PROGRESS:
            # A run interrupted by a crash leaves the task in_progress.
            return True
        case TaskStatus.COMPLETED:
            return False


def can_delete(status: TaskStatus) -> bool:
    match status:
        case TaskStatus.IN_PROGRESS:
            return False
        case TaskStatus.NEW | TaskStatus.COMPLETED | TaskStatus.ERROR:
            return True


def can_attach_images(status: TaskStatus) -> bool:
    match status:
        case TaskStatus.NEW:
            return True
        case TaskStatus.IN_PROGRESS | TaskStatus.COMPLETED | TaskStatus.ERROR:
            return False


class TaskLifecycle:
    """Entry point for all task operations.

    At most one processing run per task is active in this process; a second
    trigger while a run is in flight is refused.
    """

    def __init__(self, store: TaskStore, processor: TaskProcessor) -> None:
        self.store = store
        self.processor = processor
        self._lock = threading.Lock()
        self._runs: dict[int, threading.Thread] = {}

    def create_task(self) -> int:
        task_id = self.store.create_task()
        logger.info("Created task %s", task_id)
        return task_id

    def get_task(self, task_id: int) -> Task:
        """Return the task with its images, faces and statistics."""
        return load_full_task(self.store, task_id)

    def delete_task(self, task_id: int) -> None:
        """Delete the task, its images and faces, and its image folder.

        Failing to remove the folder is logged; the task is still deleted.
        """
        task = self.store.load_task(task_id)
        if not can_delete(task.status) or self.is_running(task_id):
            raise InvalidStateError(f"task {task_id} cannot be deleted while processing")

        self.store.delete_task(task_id)
        try:
            self.store.delete_task_files(task_id)
        except OSError as e:
            logger.warning("Task %s: cannot remove image folder: %s", task_id, e)
        logger.info("Deleted task %s", task_id)

    def attach_image(self, task_id: int, upload: UploadedImage) -> Image:
        """Validate an upload, store it on disk and record it on the task."""
        if upload.content_type != ACCEPTED_CONTENT_TYPE:
            raise InvalidStateError(
                f"unsupported content type {upload.content_type!r}, "
                f"expected {ACCEPTED_CONTENT_TYPE!r}"
            )

        task = self.store.load_task(task_id)
        if not can_attach_images(task.status):
            raise InvalidStateError(
                f"task {task_id} is {task.status.value}, images can only be added to new tasks"
            )
        if self.store.image_name_exists(task_id, upload.name):
            raise InvalidStateError(f"image {upload.name!r} already exists in task {task_id}")

        decoded = self.store.decode_image_file(upload.data)
        file_name = self.store.save_image_file(task_id, upload.name, decoded)
        image = Image(id=None, task_id=task_id, name=upload.name, file_name=file_name)
        try:
            return self.store.create_image_record(image)
        except (InvalidStateError, PersistenceError):
            self.store.remove_image_file(image)
            raise

    def begin_processing(self, task_id: int) -> threading.Thread:
        """Mark the task in_progress and start processing it in the background.

        Returns the started thread as acknowledgement. A completed task is
        left untouched; its run ends without doing anything.
        """
        with self._lock:
            if self.is_running(task_id):
                raise InvalidStateError(f"task {task_id} is already being processed")

            task = self.store.load_task(task_id)
            if can_start_processing(task.status):
                self.store.set_task_status(task_id, TaskStatus.IN_PROGRESS)

            thread = threading.Thread(
                target=self._run, args=(task_id,), name=f"task-{task_id}", daemon=True
            )
            self._runs[task_id] = thread
        thread.start()
        logger.info("Task %s: processing started", task_id)
        return thread

    def is_running(self, task_id: int) -> bool:
        return task_id in self._runs

    def wait(self, task_id: int, timeout: float | None = None) -> None:
        """Block until the task's current run (if any) finishes."""
        thread = self._runs.get(task_id)
        if thread is not None:
            thread.join(timeout)

    def _run(self, task_id: int) -> None:
        try:
            self.processor.process(task_id)
        finally:
            with self._lock:
                if self._runs.get(task_id) is threading.current_thread():
                    del self._runs[task_id]
