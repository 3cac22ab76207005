"""
Email verification and change pipeline - core business logic.

This module ties the reconciliation rules to Salesforce:
1. Compare the local user's email with the contact's preferred email
2. Check that a new address is not used by another contact
3. Compute the field update plan
4. Write the plan to Salesforce
5. Return result (success or failure)

Remote errors are logged and converted to False / EmailChangeResult with
success=False. No exceptions propagate out of the public methods.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .duplicate_detector import DuplicateDetector
from .email_reconciler import EmailUpdatePlan, compute_expected_email, is_mismatch, plan_email_update
from .models import CONTACT_OBJECT, Contact, LocalUser
from integrations.salesforce_gateway import ContactGateway
from services.debug_log import DebugLogger
from services.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class EmailValidation:
    """
    Outcome of comparing a local email with Salesforce.

    Attributes:
        mismatch: True if the local email differs from the preferred email
        expected_email: The contact's preferred email address
    """
    mismatch: bool
    expected_email: str


@dataclass
class EmailChangeResult:
    """
    Result of an email change.

    Attributes:
        success: Whether Salesforce was updated
        contact_id: Salesforce Contact Id
        conflict: True if another contact already uses the new address
        plan: Update plan (if one was computed)
        error_message: Error description (if the change failed)
    """
    success: bool
    contact_id: str
    conflict: bool = False
    plan: Optional[EmailUpdatePlan] = None
    error_message: Optional[str] = None

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"EmailChangeResult(success=True, contact_id={self.contact_id})"
        else:
            return (
                f"EmailChangeResult(success=False, contact_id={self.contact_id}, "
                f"conflict={self.conflict}, error={self.error_message})"
            )


class EmailVerificationService:
    """
    Verifies and updates a local user's email against their Salesforce Contact.

    Args:
        gateway: Salesforce gateway
        settings: Runtime settings (debug logging, duplicate-check policy)
        detector: Duplicate detector (built from settings if omitted)
    """

    def __init__(
        self,
        gateway: ContactGateway,
        settings: Optional[Settings] = None,
        detector: Optional[DuplicateDetector] = None
    ):
        self.gateway = gateway
        self.settings = settings or Settings()
        self.detector = detector or DuplicateDetector(
            gateway, fail_closed=self.settings.duplicate_check_fail_closed
        )
        self.debug_log = DebugLogger('EmailVerificationService', self.settings)

    def validate_email(self, contact: Contact, user: LocalUser) -> EmailValidation:
        """
        Compare the user's email with the contact's preferred email.

        Returns:
            EmailValidation with the mismatch flag and the expected address
        """
        return EmailValidation(
            mismatch=is_mismatch(user.email, contact),
            expected_email=compute_expected_email(contact)
        )

    def email_already_in_use(self, user: LocalUser, new_email: str) -> bool:
        """Check if another contact than the user's own uses new_email."""
        return self.detector.find_conflict(new_email, user.contact_id)

    def update_email(self, new_email: str, old_email: Optional[str], contact: Contact) -> bool:
        """
        Write a changed email address to Salesforce.

        Returns:
            True if the contact was updated, False if Salesforce rejected it
        """
        plan = plan_email_update(new_email, old_email, contact)
        return self._apply_plan(contact, plan)

    def process_email_change(self, user: LocalUser, new_email: str, contact: Contact) -> EmailChangeResult:
        """
        Run the full email change: duplicate check, plan, update.

        Args:
            user: Local user with the current (old) email
            new_email: Address the user is changing to
            contact: User's Salesforce Contact as currently stored

        Returns:
            EmailChangeResult with success=True or success=False (errors logged)
        """
        logger.info(f"Processing email change for contact {contact.id}")

        if self.email_already_in_use(user, new_email):
            logger.warning(f"Email change rejected for contact {contact.id}: address in use")
            return EmailChangeResult(
                success=False,
                contact_id=contact.id,
                conflict=True,
                error_message="Email address is already in use by another contact"
            )

        plan = plan_email_update(new_email, user.email, contact)
        if not self._apply_plan(contact, plan):
            return EmailChangeResult(
                success=False,
                contact_id=contact.id,
                plan=plan,
                error_message="Salesforce contact update failed"
            )

        logger.info(
            f"Email updated for contact {contact.id}: "
            f"preferred={plan.preferred_channel.value}, field={plan.primary_field}"
        )
        return EmailChangeResult(success=True, contact_id=contact.id, plan=plan)

    def _apply_plan(self, contact: Contact, plan: EmailUpdatePlan) -> bool:
        self.debug_log('update_email', plan.to_params())

        result = self.gateway.update(contact.id, plan.to_params(), CONTACT_OBJECT)
        if not result.success:
            logger.error(f"Failed to update email on contact {contact.id}: {result.failure.message}")
            return False
        return True
