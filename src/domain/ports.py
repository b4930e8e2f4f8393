"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .models import RegistrationForm, RegistrationRecord


class ConstraintKind(str, Enum):
    """
    Classes of store-side constraint failures.

    Adapters translate driver-specific error codes into one of these so the
    submission controller can pick a friendly message without knowing which
    database sits behind the port.
    """

    UNIQUE = "unique"
    INVALID_TEXT = "invalid_text"
    NOT_NULL = "not_null"
    CHECK = "check"
    FOREIGN_KEY = "foreign_key"
    OTHER = "other"


class StoreError(Exception):
    """Backing store failed for a reason other than a constraint."""

    pass


class StoreConstraintError(StoreError):
    """Backing store rejected an insert on a constraint."""

    def __init__(self, kind: ConstraintKind, column: str | None = None, message: str = "") -> None:
        super().__init__(message or f"{kind.value} constraint violated on {column or 'unknown column'}")
        self.kind = kind
        self.column = column


@dataclass(frozen=True)
class PostalAddress:
    """Address details resolved from a postal code."""

    state: str
    district: str
    country: str


class RegistrationStore(Protocol):
    """Port interface for registration persistence."""

    def probe(self) -> bool:
        """
        Check that the store is reachable and the registrations table exists.

        Returns:
            True if the store answered, False otherwise
        """
        ...

    def find_by_identity_number(self, identity_card_number: str) -> RegistrationRecord | None:
        """
        Look up an existing registration by identity card number.

        Args:
            identity_card_number: 12-digit identity number (digits only)

        Returns:
            The stored record, or None if the number is not registered

        Raises:
            StoreError: If the query could not be executed
        """
        ...

    def insert(self, form: RegistrationForm) -> RegistrationRecord:
        """
        Persist a completed registration.

        The store is the sole arbiter of email uniqueness.

        Args:
            form: Fully validated registration form

        Returns:
            The stored record with its assigned id and creation timestamp

        Raises:
            StoreConstraintError: If a store constraint rejected the row
            StoreError: For any other store failure
        """
        ...


class EmailNotifier(Protocol):
    """Port interface for email delivery."""

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Deliver an HTML email.

        Args:
            to: Recipient email address
            subject: Message subject
            html_body: Rendered HTML body

        Raises:
            NotifierFailure: If the message could not be delivered
        """
        ...


class PostalLookup(Protocol):
    """Port interface for postal-code address lookup."""

    async def lookup(self, code: str, country: str) -> PostalAddress:
        """
        Resolve a postal code to state and district.

        Raises:
            UnsupportedCountry: No upstream exists for this country
            PostalCodeNotFound: Upstream has no data for this code
            UpstreamLookupFailure: Upstream could not be reached or parsed
        """
        ...
