"""
Submission controller - final validation, uniqueness check, persistence.

Submission Flow
===============

1. Re-validate both steps and every entry     -> ValidationFailed
2. Probe the store                            -> StoreUnavailable
3. Look up the identity card number           -> DuplicateIdentity
4. Insert the record; map store constraints   -> DuplicateEmail, DuplicateIdentity,
                                                 InvalidData, MissingRequired,
                                                 ConstraintViolation, StoreUnavailable
5. Send the confirmation email (best-effort), reset the wizard, return the id

Any failure in steps 1-4 leaves the wizard untouched so the runner can
correct the form and retry. Store writes are never retried automatically.
"""

import logging
from dataclasses import dataclass

from .emails import render_confirmation_email
from .exceptions import (
    ConstraintViolation,
    DuplicateEmail,
    DuplicateIdentity,
    InvalidData,
    MissingRequired,
    NotifierFailure,
    RegistrationError,
    StoreUnavailable,
    ValidationFailed,
)
from .ports import (
    ConstraintKind,
    EmailNotifier,
    RegistrationStore,
    StoreConstraintError,
    StoreError,
)
from .wizard import RegistrationWizard

logger = logging.getLogger(__name__)

_CONSTRAINT_ERRORS: dict[ConstraintKind, type[RegistrationError]] = {
    ConstraintKind.INVALID_TEXT: InvalidData,
    ConstraintKind.NOT_NULL: MissingRequired,
    ConstraintKind.CHECK: ConstraintViolation,
    ConstraintKind.FOREIGN_KEY: ConstraintViolation,
    ConstraintKind.OTHER: ConstraintViolation,
}

SUCCESS_MESSAGE = "Thank you for registering for ApizRace. A confirmation has been sent to your email."


def map_constraint_error(error: StoreConstraintError) -> RegistrationError:
    """Translate a store constraint failure into the matching domain error."""
    if error.kind == ConstraintKind.UNIQUE:
        if error.column and "identity" in error.column:
            return DuplicateIdentity(str(error))
        return DuplicateEmail(str(error))
    return _CONSTRAINT_ERRORS[error.kind](str(error))


@dataclass
class SubmissionController:
    """
    Orchestrates the final registration submission.

    Works on the wizard passed in; on success the wizard is reset to an
    empty form on the first step.
    """

    store: RegistrationStore
    notifier: EmailNotifier
    event_name: str = "ApizRace 2025"
    support_email: str | None = None
    postal_code_whitelist: frozenset[str] = frozenset()

    def submit(self, wizard: RegistrationWizard) -> str:
        """
        Submit the wizard's form.

        Args:
            wizard: The runner's wizard holding the completed form

        Returns:
            Identifier assigned to the stored registration

        Raises:
            RegistrationError: A subclass naming the failure kind
        """
        results = wizard.validate_all()
        failed = [result for result in results if not result.is_valid]
        if failed:
            logger.info("Submission rejected: %s", failed[0].message)
            raise ValidationFailed(failed[0])

        entries = wizard.validate_entries(self.postal_code_whitelist)
        if not entries.is_valid:
            logger.info("Submission rejected: %s", entries.message)
            raise ValidationFailed(entries)

        form = wizard.form

        try:
            reachable = self.store.probe()
        except StoreError as e:
            logger.error("Store probe failed: %s", e)
            raise StoreUnavailable(str(e)) from e
        if not reachable:
            logger.error("Store probe failed: registrations table not reachable")
            raise StoreUnavailable("Database table structure verification failed")

        try:
            existing = self.store.find_by_identity_number(form.identity_card_number)
        except StoreError as e:
            logger.error("Identity lookup failed: %s", e)
            raise StoreUnavailable(str(e)) from e
        if existing is not None:
            logger.info("Duplicate IC number detected")
            raise DuplicateIdentity()

        try:
            record = self.store.insert(form)
        except StoreConstraintError as e:
            logger.warning("Registration insert rejected: %s", e)
            raise map_constraint_error(e) from e
        except StoreError as e:
            logger.error("Registration insert failed: %s", e)
            raise StoreUnavailable(str(e)) from e

        logger.info("Registration stored with id %s", record.id)

        self._send_confirmation(wizard)
        wizard.reset()
        return record.id

    def _send_confirmation(self, wizard: RegistrationWizard) -> None:
        form = wizard.form
        message = render_confirmation_email(
            form.email,
            form.first_name,
            form.last_name,
            form.race_category,
            form.t_shirt_size,
            event_name=self.event_name,
            support_email=self.support_email,
        )
        try:
            self.notifier.send(message.to, message.subject, message.html_body)
        except NotifierFailure:
            logger.exception("Error sending confirmation email to %s", form.email)
