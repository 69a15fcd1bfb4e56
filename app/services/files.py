import base64
import binascii
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from app.core import config
from app.core.errors import UploadError

logger = logging.getLogger("proposal_server.files")


@dataclass
class StoredFile:
    key: str
    url: str


def safe_filename(name: str) -> str:
    name = Path(name.strip()).name
    name = re.sub(r"[^\w\s\-\.]", "", name, flags=re.UNICODE)
    name = re.sub(r"\s+", "-", name)
    return name[:120] if name.strip(".") else "image"


class LocalFileStore:
    """Writes uploads below a directory that the app serves at /uploads."""

    def __init__(self, root: str = None, public_url: str = None):
        self.root = Path(root or config.UPLOAD_DIR)
        self.public_url = (public_url or config.PUBLIC_URL).rstrip("/")

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise UploadError(key, "Invalid storage key")
        return path

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> StoredFile:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info(f"Stored {key} ({len(data)} bytes, {content_type})")
        return self.get(key)

    def get(self, key: str) -> StoredFile:
        return StoredFile(key=key, url=f"{self.public_url}/uploads/{key}")


def upload_image(
    store: LocalFileStore, file_name: str, file_data: str, mime_type: str, owner_id: int
) -> StoredFile:
    if not mime_type or not mime_type.startswith("image/"):
        raise UploadError(file_name, "File is not a valid image")
    try:
        data = base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UploadError(file_name, "File data is not valid base64") from e
    if not data:
        raise UploadError(file_name, "File is empty")

    key = f"proposals/{owner_id}/{int(time.time() * 1000)}-{safe_filename(file_name)}"
    try:
        return store.put(key, data, mime_type)
    except OSError as e:
        logger.error(f"Failed to write upload {file_name}: {e}")
        raise UploadError(file_name, "Could not store file") from e


def upload_many(
    store: LocalFileStore, files: Iterable, owner_id: int
) -> Tuple[List[StoredFile], List[UploadError]]:
    """Uploads each file independently; one failure does not undo the others."""
    stored, failed = [], []
    for f in files:
        try:
            stored.append(
                upload_image(store, f.file_name, f.file_data, f.mime_type, owner_id)
            )
        except UploadError as e:
            logger.warning(f"Upload failed for {e.file_name}: {e.message}")
            failed.append(e)
    return stored, failed
