"""CRUD operations for tasks, images and faces in DuckDB."""

import duckdb

from face_track.models import BoundingBox, Face, Image, Statistics, Task, TaskStatus


def insert_task(conn: duckdb.DuckDBPyConnection) -> int:
    """Insert an empty task with status 'new' and return its ID."""
    row = conn.execute(
        "INSERT INTO tasks (status) VALUES (?) RETURNING id", [TaskStatus.NEW.value]
    ).fetchone()
    return row[0]


def get_task(conn: duckdb.DuckDBPyConnection, task_id: int) -> Task | None:
    """Look up a single task row (without images)."""
    row = conn.execute(
        """
        SELECT id, status, faces_total, faces_male, faces_female,
               age_male_avg, age_female_avg
        FROM tasks
        WHERE id = ?
        """,
        [task_id],
    ).fetchone()
    if row is None:
        return None
    return _row_to_task(row)


def update_task_status(
    conn: duckdb.DuckDBPyConnection, task_id: int, status: TaskStatus
) -> bool:
    """Set the task status. Return False if the task does not exist."""
    rows = conn.execute(
        "UPDATE tasks SET status = ? WHERE id = ? RETURNING id", [status.value, task_id]
    ).fetchall()
    return len(rows) > 0


def update_task_statistics(
    conn: duckdb.DuckDBPyConnection,
    task_id: int,
    status: TaskStatus,
    stats: Statistics,
) -> bool:
    """Store statistics together with the task status. Return False if the task does not exist."""
    rows = conn.execute(
        """
        UPDATE tasks
        SET status = ?,
            faces_total = ?,
            faces_male = ?,
            faces_female = ?,
            age_male_avg = ?,
            age_female_avg = ?
        WHERE id = ?
        RETURNING id
        """,
        [
            status.value,
            stats.faces_total,
            stats.faces_male,
            stats.faces_female,
            stats.age_male_avg,
            stats.age_female_avg,
            task_id,
        ],
    ).fetchall()
    return len(rows) > 0


def delete_task(conn: duckdb.DuckDBPyConnection, task_id: int) -> bool:
    """Delete a task with its images and faces. Return False if the task does not exist."""
    conn.execute(
        "DELETE FROM faces WHERE image_id IN (SELECT id FROM images WHERE task_id = ?)",
        [task_id],
    )
    conn.execute("DELETE FROM images WHERE task_id = ?", [task_id])
    rows = conn.execute("DELETE FROM tasks WHERE id = ? RETURNING id", [task_id]).fetchall()
    return len(rows) > 0


def insert_image(conn: duckdb.DuckDBPyConnection, image: Image) -> int:
    """Insert an image record and return its ID."""
    row = conn.execute(
        """
        INSERT INTO images (task_id, name, file_name, done)
        VALUES (?, ?, ?, ?)
        RETURNING id
        """,
        [image.task_id, image.name, image.file_name, image.done],
    ).fetchone()
    return row[0]


def image_name_exists(conn: duckdb.DuckDBPyConnection, task_id: int, name: str) -> bool:
    """Return True if the task already has an image with this exact name."""
    row = conn.execute(
        "SELECT 1 FROM images WHERE task_id = ? AND name = ?", [task_id, name]
    ).fetchone()
    return row is not None


def list_images(conn: duckdb.DuckDBPyConnection, task_id: int) -> list[Image]:
    """List the images of a task in insertion order."""
    rows = conn.execute(
        "SELECT id, task_id, name, file_name, done FROM images WHERE task_id = ? ORDER BY id",
        [task_id],
    ).fetchall()
    return [_row_to_image(row) for row in rows]


def get_faces_by_image_ids(
    conn: duckdb.DuckDBPyConnection, image_ids: list[int]
) -> dict[int, list[Face]]:
    """Return faces grouped by image ID. Images without faces are absent from the map."""
    if not image_ids:
        return {}

    placeholders = ", ".join(["?"] * len(image_ids))
    rows = conn.execute(
        f"""
        SELECT id, image_id, gender, age, bbox_height, bbox_width, bbox_x, bbox_y
        FROM faces
        WHERE image_id IN ({placeholders})
        ORDER BY id
        """,
        image_ids,
    ).fetchall()

    faces: dict[int, list[Face]] = {}
    for row in rows:
        face = _row_to_face(row)
        faces.setdefault(face.image_id, []).append(face)
    return faces


def insert_faces(conn: duckdb.DuckDBPyConnection, faces: list[Face]) -> None:
    """Batch insert face records."""
    for face in faces:
        conn.execute(
            """
            INSERT INTO faces
            (image_id, gender, age, bbox_height, bbox_width, bbox_x, bbox_y)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                face.image_id,
                face.gender,
                face.age,
                face.bbox.height,
                face.bbox.width,
                face.bbox.x,
                face.bbox.y,
            ],
        )


def mark_image_done(conn: duckdb.DuckDBPyConnection, image_id: int) -> None:
    """Flag an image as submitted to detection."""
    conn.execute("UPDATE images SET done = true WHERE id = ?", [image_id])


def _row_to_task(row: tuple) -> Task:
    """Convert a DB row to a Task.

    Column order: 0:id, 1:status, 2:faces_total, 3:faces_male,
    4:faces_female, 5:age_male_avg, 6:age_female_avg
    """
    return Task(
        id=row[0],
        status=TaskStatus(row[1]),
        statistics=Statistics(
            faces_total=row[2],
            faces_male=row[3],
            faces_female=row[4],
            age_male_avg=row[5],
            age_female_avg=row[6],
        ),
    )


def _row_to_image(row: tuple) -> Image:
    return Image(id=row[0], task_id=row[1], name=row[2], file_name=row[3], done=row[4])


def _row_to_face(row: tuple) -> Face:
    return Face(
        id=row[0],
        image_id=row[1],
        gender=row[2],
        age=row[3],
        bbox=BoundingBox(height=row[4], width=row[5], x=row[6], y=row[7]),
    )
