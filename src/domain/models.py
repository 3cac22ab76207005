"""
Data models for the contact reconciliation domain.

These type-safe data structures define clear contracts between components.
Salesforce field names are part of the wire contract and are kept verbatim.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Salesforce object and field names
CONTACT_OBJECT = 'Contact'
ACCOUNT_OBJECT = 'Account'
CAMPAIGN_MEMBER_OBJECT = 'CampaignMember'

ID_FIELD = 'Id'
WORK_EMAIL_FIELD = 'Work_Email__c'
PERSONAL_EMAIL_FIELD = 'Personal_Email__c'
ALTERNATE_EMAIL_FIELD = 'Alternate_Email__c'
PREFERRED_EMAIL_FIELD = 'Preferred_Email__c'
OPTED_OUT_FIELD = 'HasOptedOutOfEmail'

EMAIL_FIELDS = (WORK_EMAIL_FIELD, PERSONAL_EMAIL_FIELD, ALTERNATE_EMAIL_FIELD)

# Salesforce Contact "Role" values for an educator
EDUCATOR_ROLES = ('Teacher', 'School or District Leader', 'Other Educator')


def is_educator_role(role: Optional[str]) -> bool:
    """Check if a Contact role value belongs to an educator."""
    return role in EDUCATOR_ROLES


class PreferredChannel(str, Enum):
    """Which primary email field is authoritative for a contact."""
    WORK = 'Work'
    PERSONAL = 'Personal'

    @property
    def field_name(self) -> str:
        """Salesforce field holding the email for this channel."""
        if self is PreferredChannel.WORK:
            return WORK_EMAIL_FIELD
        return PERSONAL_EMAIL_FIELD

    @classmethod
    def from_value(cls, value: Optional[str]) -> 'PreferredChannel':
        """
        Parse a Preferred_Email__c picklist value.

        Anything other than "Work" (including a blank value) selects the
        personal channel.
        """
        if value == cls.WORK.value:
            return cls.WORK
        return cls.PERSONAL


@dataclass
class Contact:
    """
    Salesforce Contact record as seen by the reconciliation rules.

    Attributes:
        id: Salesforce record Id (immutable)
        work_email: Work_Email__c
        personal_email: Personal_Email__c
        alternate_email: Alternate_Email__c
        preferred_channel: Preferred_Email__c parsed to a PreferredChannel
        opted_out_of_email: HasOptedOutOfEmail
        raw: Full record as returned by Salesforce
    """
    id: str
    work_email: Optional[str] = None
    personal_email: Optional[str] = None
    alternate_email: Optional[str] = None
    preferred_channel: PreferredChannel = PreferredChannel.PERSONAL
    opted_out_of_email: bool = False
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Contact':
        """
        Build a Contact from a Salesforce record dict.

        Args:
            record: Record with Salesforce field names as keys

        Returns:
            Contact populated from the known email fields
        """
        return cls(
            id=record.get(ID_FIELD, ''),
            work_email=record.get(WORK_EMAIL_FIELD),
            personal_email=record.get(PERSONAL_EMAIL_FIELD),
            alternate_email=record.get(ALTERNATE_EMAIL_FIELD),
            preferred_channel=PreferredChannel.from_value(record.get(PREFERRED_EMAIL_FIELD)),
            opted_out_of_email=bool(record.get(OPTED_OUT_FIELD, False)),
            raw=dict(record)
        )

    def to_record(self) -> Dict[str, Any]:
        """Convert back to a Salesforce field map (raw fields included)."""
        record = dict(self.raw)
        record.update({
            ID_FIELD: self.id,
            WORK_EMAIL_FIELD: self.work_email,
            PERSONAL_EMAIL_FIELD: self.personal_email,
            ALTERNATE_EMAIL_FIELD: self.alternate_email,
            PREFERRED_EMAIL_FIELD: self.preferred_channel.value,
            OPTED_OUT_FIELD: self.opted_out_of_email,
        })
        return record

    def get_field(self, name: str) -> Any:
        """Return a field value by its Salesforce name."""
        return self.to_record().get(name)


@dataclass
class LocalUser:
    """
    Local site account linked to a Salesforce Contact.

    Attributes:
        email: Current email address on the local account
        contact_id: Linked Salesforce Contact Id (None if not linked)
    """
    email: str
    contact_id: Optional[str] = None


@dataclass
class RemoteFailure:
    """
    Failure reported by the Salesforce gateway.

    Attributes:
        message: Underlying error message
        code: Implementation-defined code (HTTP status, 0 for transport errors)
    """
    message: str
    code: int = 0


@dataclass
class GatewayResult:
    """
    Result of a gateway operation.

    This explicit result type makes success/failure handling clear
    and prevents exceptions from being used for control flow.

    Attributes:
        success: Whether the remote call succeeded
        value: Returned value (if the call succeeded)
        failure: RemoteFailure (if the call failed)
    """
    success: bool
    value: Any = None
    failure: Optional[RemoteFailure] = None

    @classmethod
    def ok(cls, value: Any = None) -> 'GatewayResult':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, message: str, code: int = 0) -> 'GatewayResult':
        return cls(success=False, failure=RemoteFailure(message=message, code=code))

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"GatewayResult(success=True, value={self.value!r})"
        else:
            return (
                f"GatewayResult(success=False, code={self.failure.code}, "
                f"error={self.failure.message})"
            )


@dataclass
class QueryResult:
    """
    Records returned by a SOQL query.

    Attributes:
        records: Matching records (dicts keyed by Salesforce field name)
        is_complete: True when no further pages remain
        size: Total number of matching records reported by Salesforce
    """
    records: List[Dict[str, Any]] = field(default_factory=list)
    is_complete: bool = True
    size: int = 0
