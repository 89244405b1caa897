"""On-disk storage of task images."""

import shutil
import time
from io import BytesIO
from pathlib import Path

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from face_track.config import FOLDERS_AMOUNT


def task_dir(images_dir: Path, task_id: int) -> Path:
    """Return the folder holding a task's images.

    Task folders are grouped under ``task_id % FOLDERS_AMOUNT`` so that no
    single parent folder grows beyond FOLDERS_AMOUNT children.
    """
    return images_dir / str(task_id % FOLDERS_AMOUNT) / str(task_id)


def unique_filename(name: str) -> str:
    """Append a nanosecond timestamp to the file stem."""
    path = Path(name)
    return f"{path.stem}_{time.time_ns()}{path.suffix}"


def decode_image(data: bytes) -> PILImage.Image:
    """Decode uploaded bytes into a Pillow image. Raise ValueError if they are not an image."""
    try:
        img = PILImage.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"cannot decode image: {e}") from e
    return img


def save_image(img: PILImage.Image, path: Path) -> None:
    """Write the image as JPEG, creating parent folders as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.save(path, format="JPEG")


def remove_task_dir(images_dir: Path, task_id: int) -> None:
    """Remove a task's image folder with its content, if present."""
    folder = task_dir(images_dir, task_id)
    if folder.exists():
        shutil.rmtree(folder)
