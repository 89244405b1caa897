"""Task management CLI: create tasks, upload images, run face detection."""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def main() -> None:
    """CLI entry point for task management."""
    parser = argparse.ArgumentParser(description="Face track task manager")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # init-db
    subparsers.add_parser("init-db", help="Initialize the database schema")

    # create
    subparsers.add_parser("create", help="Create a new empty task")

    # add-image
    add_parser = subparsers.add_parser("add-image", help="Attach JPEG images to a new task")
    add_parser.add_argument("task_id", type=int, help="Task ID")
    add_parser.add_argument("paths", nargs="+", help="Image files to attach")

    # process
    process_parser = subparsers.add_parser(
        "process", help="Detect faces on the task's images and compute statistics"
    )
    process_parser.add_argument("task_id", type=int, help="Task ID")

    # show
    show_parser = subparsers.add_parser("show", help="Show a task with its images and faces")
    show_parser.add_argument("task_id", type=int, help="Task ID")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete a task and its images")
    delete_parser.add_argument("task_id", type=int, help="Task ID")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    if args.command == "init-db":
        from face_track.db import get_connection

        conn = get_connection()
        conn.close()
        console.print("Database initialized successfully.")
        return

    from face_track.errors import InvalidStateError, NotFoundError

    try:
        if args.command == "create":
            _cmd_create()
        elif args.command == "add-image":
            _cmd_add_image(args)
        elif args.command == "process":
            _cmd_process(args)
        elif args.command == "show":
            _cmd_show(args)
        elif args.command == "delete":
            _cmd_delete(args)
    except (NotFoundError, InvalidStateError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _build_lifecycle(with_detector: bool = False):
    """Wire the store, the detection client and the lifecycle together."""
    from face_track.config import IMAGES_DIR
    from face_track.db import get_connection
    from face_track.lifecycle import TaskLifecycle
    from face_track.processing import TaskProcessor
    from face_track.store import DuckDBTaskStore

    store = DuckDBTaskStore(get_connection(), IMAGES_DIR)
    detector = None
    if with_detector:
        from face_track.detection import FaceCloudClient

        detector = FaceCloudClient()
    return TaskLifecycle(store, TaskProcessor(store, detector))


def _cmd_create() -> None:
    lifecycle = _build_lifecycle()
    task_id = lifecycle.create_task()
    console.print(f"Created task {task_id}.")


def _cmd_add_image(args: argparse.Namespace) -> None:
    """Attach image files to a task."""
    import mimetypes
    from pathlib import Path

    from face_track.models import UploadedImage

    lifecycle = _build_lifecycle()
    for raw_path in args.paths:
        path = Path(raw_path)
        content_type, _ = mimetypes.guess_type(path.name)
        upload = UploadedImage(
            name=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        )
        lifecycle.attach_image(args.task_id, upload)
        console.print(f"  added {path.name}")


def _cmd_process(args: argparse.Namespace) -> None:
    """Start processing and wait for the background run to finish."""
    lifecycle = _build_lifecycle(with_detector=True)
    lifecycle.begin_processing(args.task_id)
    console.print(f"Task {args.task_id} is being processed.")
    lifecycle.wait(args.task_id)
    task = lifecycle.get_task(args.task_id)
    console.print(f"Task {args.task_id} finished with status [bold]{task.status.value}[/bold].")


def _cmd_show(args: argparse.Namespace) -> None:
    """Print task status, statistics and faces per image."""
    from rich.table import Table

    lifecycle = _build_lifecycle()
    task = lifecycle.get_task(args.task_id)
    stats = task.statistics

    console.print(f"Task {task.id}: [bold]{task.status.value}[/bold]")
    console.print(
        f"  Faces: {stats.faces_total} "
        f"(male {stats.faces_male}, avg age {stats.age_male_avg}; "
        f"female {stats.faces_female}, avg age {stats.age_female_avg})"
    )

    table = Table("Image", "Done", "Gender", "Age", "BBox (h, w, x, y)")
    for image in task.images:
        if not image.faces:
            table.add_row(image.name, str(image.done), "-", "-", "-")
        for face in image.faces:
            box = face.bbox
            table.add_row(
                image.name,
                str(image.done),
                face.gender,
                str(face.age),
                f"{box.height}, {box.width}, {box.x}, {box.y}",
            )
    console.print(table)


def _cmd_delete(args: argparse.Namespace) -> None:
    lifecycle = _build_lifecycle()
    lifecycle.delete_task(args.task_id)
    console.print(f"Deleted task {args.task_id}.")
