from enum import Enum
from typing import Optional


class OrganizationRole(str, Enum):
    """
    Membership roles, declared from most to least privileged.

    USER is a member with no tenant privileges, which is not the same as
    having no membership at all.
    """

    OWNER = "OWNER"
    REVIEWER = "REVIEWER"
    MEMBER = "MEMBER"
    USER = "USER"

    @classmethod
    def parse(cls, value: object) -> Optional["OrganizationRole"]:
        """
        Normalize a raw role value from the datastore.

        Returns None for anything that is not a known role, so callers
        can deny instead of guessing.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    @property
    def rank(self) -> int:
        """Privilege rank, higher is more privileged."""
        members = list(type(self))
        return len(members) - members.index(self)


class OutlineStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class SectionType(str, Enum):
    EXECUTIVE_SUMMARY = "EXECUTIVE_SUMMARY"
    TECHNICAL_APPROACH = "TECHNICAL_APPROACH"
    DESIGN = "DESIGN"
    CAPABILITIES = "CAPABILITIES"
    FOCUS_DOCUMENT = "FOCUS_DOCUMENT"
    NARRATIVE = "NARRATIVE"
    TABLE_OF_CONTENTS = "TABLE_OF_CONTENTS"
