from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path
from typing import BinaryIO

from jobtrack.config import Settings, get_settings
from jobtrack.core.errors import BoardValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx"}


class ResumeStore:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.root = Path(self.settings.resume_dir)

    @property
    def max_bytes(self) -> int:
        return self.settings.max_resume_size_mb * 1024 * 1024

    def save(self, filename: str, stream: BinaryIO) -> str:
        """Store an uploaded resume under a generated name and return that name."""
        extension = Path(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise BoardValidationError("Only PDF, DOC, and DOCX files are allowed")

        self.root.mkdir(parents=True, exist_ok=True)
        stored_name = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{extension}"
        target = self.root / stored_name

        written = 0
        with target.open("wb") as handle:
            while chunk := stream.read(64 * 1024):
                written += len(chunk)
                if written > self.max_bytes:
                    break
                handle.write(chunk)

        if written > self.max_bytes:
            target.unlink(missing_ok=True)
            raise BoardValidationError(f"File exceeds {self.settings.max_resume_size_mb} MB limit")
        return stored_name

    def path_for(self, stored_name: str) -> Path:
        path = (self.root / stored_name).resolve()
        if path.parent != self.root.resolve():
            raise BoardValidationError("invalid resume path")
        return path

    def delete(self, stored_name: str) -> bool:
        path = self.path_for(stored_name)
        if not path.is_file():
            logger.warning("Resume file %s already missing", stored_name)
            return False
        path.unlink()
        return True
