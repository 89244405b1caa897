"""Concurrent face detection over all pending images of a task."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from face_track.config import MAX_IN_FLIGHT
from face_track.errors import FaceTrackError
from face_track.gateways import DetectionGateway, TaskStore
from face_track.models import Face, Image, TaskStatus
from face_track.processing.enrichment import detect_image_faces
from face_track.processing.loading import load_full_task
from face_track.processing.statistics import compute_task_statistics

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """Results collected from one detection run."""

    faces: list[Face] = field(default_factory=list)
    done_images: list[Image] = field(default_factory=list)
    failed_image_ids: set[int] = field(default_factory=set)


class TaskProcessor:
    """Detect faces on a task's pending images and conclude the task.

    Every outcome of ``process`` is written to the task's status; nothing is
    raised to the caller.
    """

    def __init__(
        self,
        store: TaskStore,
        detector: DetectionGateway,
        max_in_flight: int = MAX_IN_FLIGHT,
    ) -> None:
        self.store = store
        self.detector = detector
        self.max_in_flight = max_in_flight

    def process(self, task_id: int) -> None:
        try:
            task = load_full_task(self.store, task_id)
        except FaceTrackError as e:
            logger.error("Task %s: cannot load task data: %s", task_id, e)
            self._fail(task_id)
            return

        if task.status is TaskStatus.COMPLETED:
            logger.info("Task %s is already completed, nothing to do", task_id)
            return

        pending = [image for image in task.images if not image.done]
        if pending:
            try:
                token = self.detector.login()
            except FaceTrackError as e:
                logger.error("Task %s: cannot obtain detection token: %s", task_id, e)
                self._fail(task_id)
                return

            logger.info("Task %s: detecting faces on %d images", task_id, len(pending))
            outcome = self.run_detection(pending, token)

            # Keep whatever succeeded so a later run only redoes the failures.
            try:
                unsaved = self.store.persist_faces_and_done_flags(
                    outcome.faces, outcome.done_images
                )
            except FaceTrackError as e:
                logger.error("Task %s: cannot store detection results: %s", task_id, e)
                self._fail(task_id)
                return

            failed = outcome.failed_image_ids | unsaved
            if failed:
                logger.error(
                    "Task %s: %d of %d images failed", task_id, len(failed), len(pending)
                )
                self._fail(task_id)
                return

        self._conclude(task_id)

    def run_detection(self, images: list[Image], token: str) -> RunOutcome:
        """Detect faces on all images with at most ``max_in_flight`` calls at once.

        Workers only return their results; this thread is the single writer of
        the outcome. A failed image does not cancel the others.
        """
        outcome = RunOutcome()
        with ThreadPoolExecutor(
            max_workers=self.max_in_flight, thread_name_prefix="face-detect"
        ) as executor:
            futures = {
                executor.submit(detect_image_faces, image, token, self.store, self.detector): image
                for image in images
            }
            for future in as_completed(futures):
                image = futures[future]
                try:
                    faces = future.result()
                except Exception as e:
                    logger.warning("Image %s (%s) failed: %s", image.id, image.name, e)
                    outcome.failed_image_ids.add(image.id)
                    continue
                outcome.faces.extend(faces)
                outcome.done_images.append(image)
        return outcome

    def _conclude(self, task_id: int) -> None:
        """Recompute statistics from the stored faces and mark the task completed."""
        try:
            task = load_full_task(self.store, task_id)
            task.statistics = compute_task_statistics(task)
            task.status = TaskStatus.COMPLETED
            self.store.persist_statistics(task)
        except FaceTrackError as e:
            logger.error("Task %s: cannot store statistics: %s", task_id, e)
            self._fail(task_id)
            return
        logger.info(
            "Task %s completed: %d faces (%d male, %d female)",
            task_id,
            task.statistics.faces_total,
            task.statistics.faces_male,
            task.statistics.faces_female,
        )

    def _fail(self, task_id: int) -> None:
        try:
            self.store.set_task_status(task_id, TaskStatus.ERROR)
        except FaceTrackError as e:
            logger.error("Task %s: cannot set error status: %s", task_id, e)
