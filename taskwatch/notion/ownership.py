"""Decide whether a Notion record or page belongs to a user."""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .client import plain_text

logger = logging.getLogger(__name__)

Properties = Dict[str, Any]


def _email_value(prop: Dict[str, Any]) -> Optional[str]:
    return prop.get("email") or None


def _rich_text_value(prop: Dict[str, Any]) -> Optional[str]:
    return plain_text(prop.get("rich_text")).strip() or None


def _title_value(prop: Dict[str, Any]) -> Optional[str]:
    return plain_text(prop.get("title")).strip() or None


# Owner fields in priority order; the first populated one names the owner.
OWNER_FIELDS: List[str] = ["User Email", "UserEmail", "Email", "user_email", "email"]

OWNER_VALUE_READERS: Dict[str, Callable[[Dict[str, Any]], Optional[str]]] = {
    "email": _email_value,
    "rich_text": _rich_text_value,
    "title": _title_value,
}

PEOPLE_FIELDS: List[str] = ["People", "Assignee"]


class OwnershipResolver:
    """Matches records to a user identity (an email address).

    A record belongs to a user when any of its owner fields equals the
    identity, or when any person in one of its people fields carries that
    identity. Both encodings are always read since upstream data is
    inconsistent about which one is populated.
    """

    def __init__(
        self,
        owner_fields: Optional[List[str]] = None,
        people_fields: Optional[List[str]] = None,
    ):
        self.owner_fields = owner_fields or list(OWNER_FIELDS)
        self.people_fields = people_fields or list(PEOPLE_FIELDS)

    def owner_identities(self, properties: Properties) -> List[str]:
        """
        Collect the values of every populated owner field.

        Args:
            properties: Property bag of a page or record

        Returns:
            Identities in owner-field order
        """
        identities = []
        for name in self.owner_fields:
            prop = properties.get(name)
            if not isinstance(prop, dict):
                continue
            reader = OWNER_VALUE_READERS.get(prop.get("type", ""))
            if reader is None:
                # Untyped payloads (e.g. test fixtures) carry the email key directly
                reader = _email_value
            value = reader(prop)
            if value:
                identities.append(value)
        return identities

    def owner_identity(self, properties: Properties) -> Optional[str]:
        """First populated owner field, used for display and as event recipient."""
        identities = self.owner_identities(properties)
        return identities[0] if identities else None

    def people_identities(self, properties: Properties) -> List[str]:
        """
        Collect identities from every people-list field.

        Args:
            properties: Property bag of a page or record

        Returns:
            Identities in field order, people without an email are skipped
        """
        identities = []
        for name in self.people_fields:
            prop = properties.get(name)
            if not isinstance(prop, dict):
                continue
            for person in prop.get("people") or []:
                identity = _person_email(person)
                if identity:
                    identities.append(identity)
        return identities

    def match(self, properties: Properties, user_identity: str) -> Tuple[bool, bool]:
        """
        Evaluate both ownership encodings.

        Every populated owner field is compared, not only the first one.

        Returns:
            Tuple of (matched via an owner field, matched via people list)
        """
        in_field = user_identity in self.owner_identities(properties)
        in_people = user_identity in self.people_identities(properties)
        return in_field, in_people

    def belongs_to_user(self, record: Dict[str, Any], user_identity: str) -> bool:
        """
        Check whether a record or page belongs to a user.

        Args:
            record: Raw Notion page object (or a bare property bag)
            user_identity: Email address of the user

        Returns:
            True if either ownership encoding matches
        """
        if not user_identity:
            return False

        properties = record.get("properties", record) or {}
        in_field, in_people = self.match(properties, user_identity)
        logger.debug(
            f"Ownership of {record.get('id', '<record>')} for {user_identity}: "
            f"in_field={in_field}, in_people={in_people}"
        )
        return in_field or in_people


def _person_email(person: Dict[str, Any]) -> Optional[str]:
    if not isinstance(person, dict):
        return None
    details = person.get("person") or {}
    return details.get("email") or person.get("email") or None
