"""
Identity-number check guard - debounced advisory duplicate check.

While the runner types an identity card number, the form asks the store
whether it is already registered. Checks are debounced and tagged with a
monotonically increasing token; a response is applied only if its token is
still the latest issued, so a slow stale response can never overwrite the
state of a newer check.

The check is advisory. Submission repeats it authoritatively.
"""

import asyncio
import logging
from dataclasses import dataclass

from .ports import RegistrationStore, StoreError
from .validators import normalize_identity_number

logger = logging.getLogger(__name__)

LENGTH_ERROR = "IC number must be 12 digits"
DUPLICATE_ERROR = "This IC number is already registered"
LOOKUP_ERROR = "Error verifying IC number. Please try again."


@dataclass(frozen=True)
class IdentityCheckResult:
    """Outcome of one identity check, as applied to the form."""

    token: int
    identity_card_number: str
    exists: bool | None = None
    error: str | None = None


class IdentityCheckGuard:
    """Runs debounced identity checks and discards stale responses."""

    def __init__(self, store: RegistrationStore, debounce_seconds: float = 0.5) -> None:
        self._store = store
        self._debounce_seconds = debounce_seconds
        self._latest_token = 0
        self.checking = False
        self.latest_result: IdentityCheckResult | None = None

    @property
    def error(self) -> str | None:
        return self.latest_result.error if self.latest_result else None

    def _issue_token(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def is_latest(self, token: int) -> bool:
        return token == self._latest_token

    def _apply(self, result: IdentityCheckResult) -> IdentityCheckResult | None:
        if not self.is_latest(result.token):
            logger.debug("Discarding stale identity check %d", result.token)
            return None
        self.latest_result = result
        return result

    async def check(self, value: str | None) -> IdentityCheckResult | None:
        """
        Check an identity number as typed.

        Returns:
            The applied result, or None when a newer check superseded this one
        """
        digits = normalize_identity_number(value)
        token = self._issue_token()

        if not digits:
            return self._apply(IdentityCheckResult(token=token, identity_card_number=digits))
        if len(digits) != 12:
            return self._apply(
                IdentityCheckResult(token=token, identity_card_number=digits, error=LENGTH_ERROR)
            )

        await asyncio.sleep(self._debounce_seconds)
        if not self.is_latest(token):
            return None

        self.checking = True
        try:
            record = await asyncio.to_thread(self._store.find_by_identity_number, digits)
        except StoreError as e:
            logger.warning("Error checking IC number: %s", e)
            result = IdentityCheckResult(token=token, identity_card_number=digits, error=LOOKUP_ERROR)
        else:
            exists = record is not None
            result = IdentityCheckResult(
                token=token,
                identity_card_number=digits,
                exists=exists,
                error=DUPLICATE_ERROR if exists else None,
            )
        finally:
            if self.is_latest(token):
                self.checking = False

        return self._apply(result)
