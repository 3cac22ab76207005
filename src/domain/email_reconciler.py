"""
Email reconciliation rules.

Decides which Salesforce email field is authoritative for a contact and
computes the field updates needed when the local user changes address.
Pure functions: no I/O, nothing here can fail.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .models import (
    ALTERNATE_EMAIL_FIELD,
    OPTED_OUT_FIELD,
    PREFERRED_EMAIL_FIELD,
    Contact,
    PreferredChannel,
)


@dataclass
class EmailUpdatePlan:
    """
    Field updates to apply to a Contact after an email change.

    Attributes:
        new_email: Address being written
        preferred_channel: Channel whose field receives new_email
        alternate_email: Alternate address to keep (None clears it)
        fields: Ordered Salesforce field -> value map sent to the update call
    """
    new_email: str
    preferred_channel: PreferredChannel
    alternate_email: Optional[str]
    fields: Dict[str, Any] = field(default_factory=OrderedDict)

    @property
    def primary_field(self) -> str:
        """Salesforce field that receives the new address."""
        return self.preferred_channel.field_name

    def to_params(self) -> Dict[str, Any]:
        """Copy of the field map, ready for the gateway update call."""
        return OrderedDict(self.fields)

    def apply_to(self, contact: Contact) -> Contact:
        """
        Return the contact as it looks after the plan is applied.

        Applying the same plan again gives the same result.
        """
        record = contact.to_record()
        record.update(self.fields)
        return Contact.from_record(record)


def compute_expected_email(contact: Contact) -> str:
    """
    Get the contact's authoritative email address.

    Returns:
        Work_Email__c when the preferred channel is Work, otherwise
        Personal_Email__c (empty string if the field is blank)
    """
    if contact.preferred_channel is PreferredChannel.WORK:
        return contact.work_email or ''
    return contact.personal_email or ''


def is_mismatch(local_email: Optional[str], contact: Contact) -> bool:
    """
    Check if the local email differs from the contact's preferred email.

    Comparison is case-insensitive (lower-casing only, no Unicode
    normalization).
    """
    return (local_email or '').lower() != compute_expected_email(contact).lower()


def plan_email_update(new_email: str, old_email: Optional[str], contact: Contact) -> EmailUpdatePlan:
    """
    Compute the Salesforce updates for a user's email change.

    Rules, in order:
    1. A new address equal to the alternate clears the alternate.
    2. A new address already stored as work or personal email flips the
       preferred channel away from the field holding the old address, so
       the old address is not overwritten.
    3. The new address is written to the field of the preferred channel.
    4. HasOptedOutOfEmail is always reset to False.

    Args:
        new_email: Address the user changed to
        old_email: Address the user had before
        contact: Contact as currently stored in Salesforce

    Returns:
        EmailUpdatePlan
    """
    channel = contact.preferred_channel
    alternate = contact.alternate_email

    if new_email == alternate:
        alternate = None

    if new_email == contact.work_email or new_email == contact.personal_email:
        if old_email == contact.work_email:
            channel = PreferredChannel.PERSONAL
        if old_email == contact.personal_email:
            channel = PreferredChannel.WORK

    fields = OrderedDict()
    fields[channel.field_name] = new_email
    fields[ALTERNATE_EMAIL_FIELD] = alternate
    fields[PREFERRED_EMAIL_FIELD] = channel.value
    fields[OPTED_OUT_FIELD] = False

    return EmailUpdatePlan(
        new_email=new_email,
        preferred_channel=channel,
        alternate_email=alternate,
        fields=fields
    )
