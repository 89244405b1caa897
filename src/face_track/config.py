"""Project-wide configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(os.environ.get("FACE_TRACK_PROJECT_ROOT", Path.cwd()))

load_dotenv(PROJECT_ROOT / ".env")

DB_PATH = Path(os.environ.get("FACE_TRACK_DB_PATH", PROJECT_ROOT / "face_track.duckdb"))
IMAGES_DIR = Path(os.environ.get("FACE_TRACK_IMAGES_DIR", PROJECT_ROOT / "data" / "images"))

# Face Cloud API
FACE_CLOUD_API_URL = os.environ.get("FACE_CLOUD__API_URL", "")
FACE_CLOUD_API_USER = os.environ.get("FACE_CLOUD__API_USER", "")
FACE_CLOUD_API_PASS = os.environ.get("FACE_CLOUD__API_PASS", "")
FACE_CLOUD_TIMEOUT = int(os.environ.get("FACE_CLOUD__TIMEOUT", "10"))

# Processing
MAX_IN_FLIGHT = 10

# Image storage: task folders are spread over at most this many parent folders
FOLDERS_AMOUNT = 30000
ACCEPTED_CONTENT_TYPE = "image/jpeg"
