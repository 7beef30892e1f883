"""Mapping profile domain service."""

import logging
from typing import Iterable, Optional

from feerecon.database.base import Database
from feerecon.domain.entities import ColumnMapping, MappingProfile
from feerecon.domain.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    profile_delete_denied,
    profile_not_found,
)

logger = logging.getLogger(__name__)


def header_signature(headers: Iterable[str]) -> str:
    """Order-insensitive fingerprint of a statement's header row."""
    names = sorted({h.strip().lower() for h in headers if h and h.strip()})
    return "|".join(names)


class MappingProfileService:
    """Service for saved column mapping profiles."""

    def __init__(self, db: Database):
        """Initialize mapping profile service.

        Args:
            db: Database instance
        """
        self.db = db

    def find_by_name(self, name: str) -> Optional[MappingProfile]:
        """Get a saved profile by name, or None."""
        return self.db.get_mapping_profile_by_name(name)

    def find_by_headers(self, headers: Iterable[str]) -> Optional[MappingProfile]:
        """Get the most used profile saved for the same set of headers."""
        signature = header_signature(headers)
        if not signature:
            return None
        return self.db.get_mapping_profile_by_signature(signature)

    def find_default(self) -> Optional[MappingProfile]:
        """Get the default profile, or None."""
        return self.db.get_default_mapping_profile()

    def get_profile(self, name: str) -> MappingProfile:
        """Get a saved profile by name.

        Raises:
            NotFoundError: If no profile has that name
        """
        profile = self.find_by_name(name)
        if profile is None:
            raise NotFoundError(profile_not_found(name))
        return profile

    def save(
        self,
        name: str,
        mapping: ColumnMapping,
        bank_name: Optional[str] = None,
        created_by: Optional[int] = None,
        headers: Optional[Iterable[str]] = None,
        is_default: Optional[bool] = None,
    ) -> MappingProfile:
        """Create or overwrite a named profile.

        An existing profile keeps its creator and usage counters; only its
        column assignments (and bank name, when given) change.

        Args:
            name: Profile name
            mapping: Column mapping to store
            bank_name: Optional bank the export format belongs to
            created_by: User ID recorded as creator of a new profile
            headers: Header row the mapping was confirmed against
            is_default: Make this the default profile, or clear the flag;
                None leaves it unchanged

        Returns:
            The saved profile

        Raises:
            ValidationError: If the name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Mapping profile name cannot be empty")

        signature = header_signature(headers) if headers is not None else None
        self.db.upsert_mapping_profile(
            name=name,
            mapping=mapping,
            bank_name=bank_name,
            created_by=created_by,
            header_signature=signature or None,
            is_default=is_default,
        )
        logger.info("Saved mapping profile '%s'", name)
        return self.get_profile(name)

    def record_use(self, name: str) -> None:
        """Increment a profile's use count and refresh its last-used time."""
        profile = self.get_profile(name)
        self.db.record_mapping_profile_use(profile.id)

    def list_profiles(self, created_by: Optional[int] = None) -> list[MappingProfile]:
        """List profiles, most used first, then most recently used."""
        return self.db.list_mapping_profiles(created_by=created_by)

    def delete_profile(self, name: str, owner_id: int) -> None:
        """Delete a profile on behalf of its creator.

        Raises:
            NotFoundError: If no profile has that name
            PermissionDeniedError: If owner_id did not create the profile
        """
        profile = self.get_profile(name)
        if profile.created_by != owner_id:
            raise PermissionDeniedError(profile_delete_denied(name, owner_id))
        self.db.delete_mapping_profile(profile.id)
        logger.info("Deleted mapping profile '%s'", name)
