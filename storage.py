import logging
import os

from flask import current_app
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Document files on the local disk, addressed by their full path."""

    def __init__(self, root):
        self.root = root

    def store(self, content: bytes, name: str) -> str:
        os.makedirs(self.root, exist_ok=True)
        path = os.path.join(self.root, secure_filename(name))
        with open(path, "wb") as fh:
            fh.write(content)
        return path

    def remove(self, path: str) -> None:
        # best-effort: file yatim lebih baik daripada gagal menghapus metadata
        try:
            os.remove(path)
        except OSError:
            logger.warning("Could not remove blob %s", path, exc_info=True)

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)


def get_blob_store():
    return LocalBlobStore(current_app.config["UPLOAD_FOLDER_DOCUMENTS"])
