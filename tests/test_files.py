"""Tests for on-disk image storage helpers."""

import pytest
from conftest import make_jpeg
from PIL import Image as PILImage

from face_track.config import FOLDERS_AMOUNT
from face_track.store.files import (
    decode_image,
    remove_task_dir,
    save_image,
    task_dir,
    unique_filename,
)


def test_task_dir_shards_by_task_id(tmp_path):
    assert task_dir(tmp_path, 42) == tmp_path / "42" / "42"
    assert task_dir(tmp_path, FOLDERS_AMOUNT + 7) == tmp_path / "7" / str(FOLDERS_AMOUNT + 7)


def test_unique_filename_keeps_stem_and_extension():
    name = unique_filename("holiday.photo.jpg")
    assert name.startswith("holiday.photo_")
    assert name.endswith(".jpg")
    assert name[len("holiday.photo_") : -len(".jpg")].isdigit()


def test_unique_filename_differs_between_calls():
    assert unique_filename("a.jpg") != unique_filename("a.jpg")


def test_decode_rejects_non_images():
    with pytest.raises(ValueError):
        decode_image(b"definitely not a jpeg")


def test_save_and_remove(tmp_path):
    img = decode_image(make_jpeg())
    path = task_dir(tmp_path, 5) / "a_1.jpg"
    save_image(img, path)

    with PILImage.open(path) as reloaded:
        assert reloaded.format == "JPEG"
        assert reloaded.size == (16, 16)

    remove_task_dir(tmp_path, 5)
    assert not task_dir(tmp_path, 5).exists()
    remove_task_dir(tmp_path, 5)  # Missing folder is fine
