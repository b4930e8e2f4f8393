"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Depends, Request

from src.adapters.postal.http import HttpPostalLookup
from src.adapters.smtp.console import ConsoleEmailNotifier
from src.adapters.smtp.sender import SmtpEmailNotifier
from src.config.settings import get_settings
from src.domain.ports import EmailNotifier, PostalLookup, RegistrationStore
from src.domain.submission import SubmissionController


def get_store(request: Request) -> RegistrationStore:
    """
    Get the registration store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


@lru_cache
def get_notifier() -> EmailNotifier:
    """Get the configured email notifier (singleton)."""
    settings = get_settings()
    if settings.email_backend == "smtp":
        return SmtpEmailNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            secure=settings.smtp_secure,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender_name=settings.sender_name,
            sender_address=settings.sender_address,
            starttls=settings.smtp_starttls,
        )
    return ConsoleEmailNotifier()


def get_postal_lookup() -> PostalLookup:
    """Get the HTTP postal lookup adapter."""
    return HttpPostalLookup(timeout=get_settings().postal_lookup_timeout_seconds)


def get_submission_controller(
    store: RegistrationStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
) -> SubmissionController:
    """
    Create submission controller with injected dependencies.

    Wires together the store and email notifier for the domain controller.
    """
    settings = get_settings()
    return SubmissionController(
        store=store,
        notifier=notifier,
        event_name=settings.event_name,
        support_email=settings.support_email,
        postal_code_whitelist=settings.postal_code_whitelist,
    )
