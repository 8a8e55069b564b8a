import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from license_portal.core.config import settings

# Configure logging
logger = logging.getLogger(__name__)

DOCUMENTS_DIR = "documents"
PHOTOS_DIR = "photos"

DOCUMENT_TYPES = (
    "nationalId",
    "medicalCertificate",
    "drivingSchoolCertificate",
    "passportPhoto",
    "additionalDocuments",
)

# Photo kind -> stored file extension
PHOTO_TYPES = {
    "profilePhoto": ".jpg",
    "signature": ".png",
}


class FileManager:
    """Stores uploaded application documents and photos"""

    @property
    def base_dir(self) -> Path:
        return Path(settings.STORAGE_DIR)

    @property
    def documents_dir(self) -> Path:
        return self.base_dir / DOCUMENTS_DIR

    @property
    def photos_dir(self) -> Path:
        return self.base_dir / PHOTOS_DIR

    def _ensure_directories(self):
        """Create the storage tree for every document and photo type"""
        directories = [self.base_dir]
        directories += [self.documents_dir / doc_type for doc_type in DOCUMENT_TYPES]
        directories += [self.photos_dir / photo_type for photo_type in PHOTO_TYPES]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Storage directories ready under {self.base_dir}")

    def _save(
        self, category: str, kind: str, owner_id: Any, original_name: str, content: bytes, extension: str
    ) -> Dict[str, Any]:
        directory = self.base_dir / category / kind
        directory.mkdir(parents=True, exist_ok=True)

        file_name = f"{owner_id}_{int(time.time() * 1000)}{extension}"
        (directory / file_name).write_bytes(content)
        logger.info(f"Saved {kind} for {owner_id} as {category}/{kind}/{file_name}")

        return {
            "fileName": original_name,
            "filePath": f"/{category}/{kind}/{file_name}",
            "fileSize": len(content),
            "uploadedAt": datetime.utcnow().isoformat(),
        }

    def save_document(
        self, doc_type: str, citizen_id: Any, original_name: Optional[str], content: bytes
    ) -> Dict[str, Any]:
        """
        Save an uploaded document and return its metadata record.
        The stored name keeps the uploaded file's extension.
        """
        if doc_type not in DOCUMENT_TYPES:
            raise ValueError(f"Unknown document type: {doc_type}")
        original_name = original_name or doc_type
        extension = os.path.splitext(original_name)[1]
        return self._save(DOCUMENTS_DIR, doc_type, citizen_id, original_name, content, extension)

    def save_photo(
        self, photo_type: str, citizen_id: Any, original_name: Optional[str], content: bytes
    ) -> Dict[str, Any]:
        """
        Save a profile photo (.jpg) or signature (.png) and return its metadata record.
        """
        if photo_type not in PHOTO_TYPES:
            raise ValueError(f"Unknown photo type: {photo_type}")
        return self._save(
            PHOTOS_DIR, photo_type, citizen_id, original_name or photo_type, content, PHOTO_TYPES[photo_type]
        )


# Create a global instance
file_manager = FileManager()
