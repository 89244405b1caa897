"""Task persistence: DuckDB records plus image files on disk."""

from face_track.store.gateway import DuckDBTaskStore

__all__ = ["DuckDBTaskStore"]
