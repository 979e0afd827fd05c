"""
Site branding: contact number and logo with a short revert history.

All state lives in one document of the "sitebrandingconfig" collection. Every
mutation reads the document, builds the complete new snapshot and writes it
back with a single replace, so a failed write leaves the previous snapshot
untouched. There is no locking: two admins changing the logo at the same time
can lose one of the updates (last write wins).
"""
import logging
from datetime import datetime
from typing import List, Optional

from pymongo.errors import PyMongoError

from errors import TransientIOError, ValidationError
from orders import CONTACT_WHATSAPP
from schemas import LOGO_HISTORY_LIMIT, LogoHistoryEntry, SiteBrandingConfig

logger = logging.getLogger(__name__)

BRANDING_COLLECTION = "sitebrandingconfig"
CONFIG_ID = "config"

ALLOWED_LOGO_TYPES = {"image/svg+xml", "image/png", "image/jpeg", "image/webp"}
MAX_LOGO_BYTES = 2 * 1024 * 1024


def default_config() -> SiteBrandingConfig:
    return SiteBrandingConfig(whatsapp=CONTACT_WHATSAPP)


def validate_logo_upload(content_type: Optional[str], size: int):
    """Raise ValidationError unless the file is an svg/png/jpeg/webp of at most 2MB."""
    if content_type not in ALLOWED_LOGO_TYPES:
        raise ValidationError(
            "Invalid file type. Please upload SVG, PNG, JPG, JPEG, or WebP files only.",
            {"file": "Unsupported file type"},
        )
    if size > MAX_LOGO_BYTES:
        raise ValidationError("File size exceeds 2MB limit.", {"file": "File too large"})


def _archive(config: SiteBrandingConfig) -> List[LogoHistoryEntry]:
    """History with the active logo pushed to the front, capped. Empty logos are not archived."""
    history = list(config.logo_history)
    if config.logo_url:
        history.insert(0, LogoHistoryEntry(
            url=config.logo_url,
            uploaded_by=config.logo_uploaded_by,
            uploaded_at=config.logo_uploaded_at,
        ))
    return history[:LOGO_HISTORY_LIMIT]


class BrandingStore:
    def __init__(self, collection):
        self.collection = collection

    @classmethod
    def from_db(cls, database) -> "BrandingStore":
        return cls(database[BRANDING_COLLECTION] if database is not None else None)

    def _load(self) -> SiteBrandingConfig:
        if self.collection is None:
            raise TransientIOError("Database not configured")
        try:
            doc = self.collection.find_one({"_id": CONFIG_ID})
        except PyMongoError as e:
            raise TransientIOError(f"Failed to read site config: {e}") from e
        if not doc:
            return default_config()
        doc.pop("_id", None)
        return SiteBrandingConfig(**{**default_config().model_dump(), **doc})

    def _save(self, config: SiteBrandingConfig) -> SiteBrandingConfig:
        if self.collection is None:
            raise TransientIOError("Database not configured")
        try:
            self.collection.replace_one({"_id": CONFIG_ID}, {"_id": CONFIG_ID, **config.model_dump()}, upsert=True)
        except PyMongoError as e:
            raise TransientIOError(f"Failed to save site config: {e}") from e
        return config

    def get_config(self) -> SiteBrandingConfig:
        """Current branding, or the defaults when missing or unreadable."""
        try:
            return self._load()
        except Exception as e:
            logger.error("Error fetching site config, using defaults: %s", e)
            return default_config()

    def update_contact_number(self, whatsapp: str) -> SiteBrandingConfig:
        current = self._load()
        return self._save(current.model_copy(update={"whatsapp": whatsapp}))

    def replace_logo(self, new_url: str, uploaded_by: str, uploaded_at: datetime) -> SiteBrandingConfig:
        current = self._load()
        updated = current.model_copy(update={
            "logo_url": new_url,
            "logo_uploaded_by": uploaded_by,
            "logo_uploaded_at": uploaded_at,
            "logo_history": _archive(current),
        })
        logger.info("Logo replaced by %s", uploaded_by)
        return self._save(updated)

    def remove_logo(self) -> SiteBrandingConfig:
        current = self._load()
        updated = current.model_copy(update={
            "logo_url": "",
            "logo_uploaded_by": "",
            "logo_uploaded_at": None,
            "logo_history": _archive(current),
        })
        logger.info("Logo removed")
        return self._save(updated)

    def revert_to(self, entry: LogoHistoryEntry) -> SiteBrandingConfig:
        """
        Make a history entry the active logo again.

        The entry is dropped from history (matched by url). Reverting to an
        entry that is no longer in history still succeeds.
        """
        current = self._load()
        history = [h for h in _archive(current) if h.url != entry.url]
        updated = current.model_copy(update={
            "logo_url": entry.url,
            "logo_uploaded_by": entry.uploaded_by,
            "logo_uploaded_at": entry.uploaded_at,
            "logo_history": history,
        })
        logger.info("Logo reverted to %s", entry.url)
        return self._save(updated)
