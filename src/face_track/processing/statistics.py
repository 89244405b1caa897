"""Aggregate detected faces into task statistics."""

from collections.abc import Iterable

from face_track.models import Face, Statistics, Task

MALE = "male"
FEMALE = "female"


def compute_statistics(faces: Iterable[Face]) -> Statistics:
    """Count faces per gender and average their ages.

    Faces of any other gender count toward the total only. An empty bucket
    averages to 0. Averages are whole years (floor of sum / count).
    """
    total = 0
    counts = {MALE: 0, FEMALE: 0}
    age_sums = {MALE: 0, FEMALE: 0}

    for face in faces:
        total += 1
        if face.gender in counts:
            counts[face.gender] += 1
            age_sums[face.gender] += face.age

    return Statistics(
        faces_total=total,
        faces_male=counts[MALE],
        faces_female=counts[FEMALE],
        age_male_avg=_average(age_sums[MALE], counts[MALE]),
        age_female_avg=_average(age_sums[FEMALE], counts[FEMALE]),
    )


def compute_task_statistics(task: Task) -> Statistics:
    """Statistics over all faces of all images of a task."""
    return compute_statistics(face for image in task.images for face in image.faces)


def _average(age_sum: int, count: int) -> int:
    if count == 0:
        return 0
    return age_sum // count
