"""Assemble a task with its images and faces."""

from face_track.gateways import TaskStore
from face_track.models import Task


def load_full_task(store: TaskStore, task_id: int) -> Task:
    """Load the task row, its images and every image's faces."""
    task = store.load_task(task_id)
    task.images = store.load_images(task_id)
    if task.images:
        faces = store.load_faces([image.id for image in task.images])
        for image in task.images:
            image.faces = faces.get(image.id, [])
    return task
