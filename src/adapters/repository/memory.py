"""
In-memory store adapter - Implements RegistrationStore protocol.

Keeps registrations in a dict guarded by a lock. Enforces the same
constraints as the PostgreSQL schema: unique email and identity card
number, a 12-digit identity number, and the gender and T-shirt size
choices. Used for local development and tests.
"""

import logging
import re
import threading
import uuid
from datetime import datetime, timezone

from src.domain.models import Gender, RegistrationForm, RegistrationRecord, TShirtSize
from src.domain.ports import ConstraintKind, StoreConstraintError, StoreError

logger = logging.getLogger(__name__)

IDENTITY_NUMBER_CHECK = re.compile(r"^[0-9]{12}$")


def _check_constraints(form: RegistrationForm) -> None:
    """Raise StoreConstraintError(CHECK) where the schema's CHECK constraints would."""
    if not IDENTITY_NUMBER_CHECK.match(form.identity_card_number or ""):
        raise StoreConstraintError(
            ConstraintKind.CHECK, "identity_card_number", "identity_card_number must be 12 digits"
        )
    if form.gender not in {g.value for g in Gender}:
        raise StoreConstraintError(ConstraintKind.CHECK, "gender", f"invalid gender {form.gender!r}")
    if form.t_shirt_size not in {s.value for s in TShirtSize}:
        raise StoreConstraintError(
            ConstraintKind.CHECK, "t_shirt_size", f"invalid t_shirt_size {form.t_shirt_size!r}"
        )


class InMemoryRegistrationStore:
    """
    Implements RegistrationStore protocol with process-local state.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Set ``available = False`` to simulate an unreachable store.
    """

    def __init__(self) -> None:
        self._records: dict[str, RegistrationRecord] = {}
        self._lock = threading.Lock()
        self.available = True

    def __len__(self) -> int:
        return len(self._records)

    def probe(self) -> bool:
        return self.available

    def find_by_identity_number(self, identity_card_number: str) -> RegistrationRecord | None:
        if not self.available:
            raise StoreError("store unavailable")
        with self._lock:
            for record in self._records.values():
                if record.identity_card_number == identity_card_number:
                    return record
        return None

    def insert(self, form: RegistrationForm) -> RegistrationRecord:
        if not self.available:
            raise StoreError("store unavailable")
        _check_constraints(form)
        with self._lock:
            for record in self._records.values():
                if record.email == form.email:
                    raise StoreConstraintError(ConstraintKind.UNIQUE, "email")
                if record.identity_card_number == form.identity_card_number:
                    raise StoreConstraintError(ConstraintKind.UNIQUE, "identity_card_number")

            record = RegistrationRecord.from_form(
                form, id=str(uuid.uuid4()), created_at=datetime.now(timezone.utc)
            )
            self._records[record.id] = record

        logger.debug("Stored registration %s", record.id)
        return record
