"""Tests for the DuckDB task store."""

import duckdb
import pytest
from conftest import make_face, make_jpeg

from face_track.errors import InvalidStateError, NotFoundError, PersistenceError
from face_track.models import Image, TaskStatus


def _stored_image(store, task_id: int, name: str, color=(10, 20, 30)) -> Image:
    decoded = store.decode_image_file(make_jpeg(color))
    file_name = store.save_image_file(task_id, name, decoded)
    return store.create_image_record(
        Image(id=None, task_id=task_id, name=name, file_name=file_name)
    )


def test_load_missing_task(store):
    with pytest.raises(NotFoundError):
        store.load_task(123)


def test_set_status_of_missing_task(store):
    with pytest.raises(NotFoundError):
        store.set_task_status(123, TaskStatus.ERROR)


def test_delete_missing_task(store):
    with pytest.raises(NotFoundError):
        store.delete_task(123)


def test_saved_image_is_readable(store):
    task_id = store.create_task()
    image = _stored_image(store, task_id, "cat.jpg")

    assert image.id is not None
    assert image.file_name != "cat.jpg"
    assert store.image_path(image).exists()
    assert store.read_image_bytes(image)[:2] == b"\xff\xd8"


def test_read_missing_file(store):
    image = Image(id=1, task_id=1, name="gone.jpg", file_name="gone_1.jpg")
    with pytest.raises(PersistenceError):
        store.read_image_bytes(image)


def test_decode_invalid_upload(store):
    with pytest.raises(InvalidStateError):
        store.decode_image_file(b"not an image")


def test_duplicate_record_rejected(store):
    task_id = store.create_task()
    _stored_image(store, task_id, "cat.jpg")
    with pytest.raises(InvalidStateError):
        store.create_image_record(
            Image(id=None, task_id=task_id, name="cat.jpg", file_name="cat_2.jpg")
        )
    assert len(store.load_images(task_id)) == 1


def test_persist_faces_and_done_flags(store):
    task_id = store.create_task()
    a = _stored_image(store, task_id, "a.jpg")
    b = _stored_image(store, task_id, "b.jpg")
    c = _stored_image(store, task_id, "c.jpg")

    failed = store.persist_faces_and_done_flags(
        [make_face(a.id, "male", 20), make_face(a.id, "female", 30)], [a, b]
    )

    assert failed == set()
    images = {img.name: img for img in store.load_images(task_id)}
    assert images["a.jpg"].done and images["b.jpg"].done
    assert not images["c.jpg"].done
    faces = store.load_faces([a.id, b.id, c.id])
    assert len(faces[a.id]) == 2
    assert b.id not in faces


def test_persist_is_per_image(store, db_conn):
    task_id = store.create_task()
    good = _stored_image(store, task_id, "good.jpg")
    bad = _stored_image(store, task_id, "bad.jpg")
    # A face whose gender is NULL violates the NOT NULL constraint
    broken = make_face(bad.id, None, 10)

    failed = store.persist_faces_and_done_flags([make_face(good.id, "male", 20), broken], [good, bad])

    assert failed == {bad.id}
    images = {img.name: img for img in store.load_images(task_id)}
    assert images["good.jpg"].done
    assert not images["bad.jpg"].done
    assert store.load_faces([bad.id]) == {}
    assert len(store.load_faces([good.id])[good.id]) == 1


def test_closed_connection_raises_persistence_error(tmp_path):
    from face_track.store import DuckDBTaskStore

    conn = duckdb.connect(":memory:")
    conn.close()
    store = DuckDBTaskStore(conn, tmp_path)
    with pytest.raises(PersistenceError):
        store.create_task()
