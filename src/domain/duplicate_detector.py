"""
Duplicate email detection across Salesforce contacts.
"""

import logging
from typing import Optional

from .models import CONTACT_OBJECT, EMAIL_FIELDS, ID_FIELD, WORK_EMAIL_FIELD
from integrations.salesforce_gateway import ContactGateway
from services.soql import SelectQuery, build_or_equals

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """
    Finds other contacts that already use an email address.

    Matching is exact as evaluated by Salesforce on Work_Email__c,
    Personal_Email__c and Alternate_Email__c; the candidate is escaped but
    not case-folded.

    Args:
        gateway: Salesforce gateway
        fail_closed: Report a conflict when the lookup fails (default: report
            no conflict, so a Salesforce outage does not block the user)
    """

    def __init__(self, gateway: ContactGateway, fail_closed: bool = False):
        self.gateway = gateway
        self.fail_closed = fail_closed

    def build_query(self, candidate_email: str) -> SelectQuery:
        return SelectQuery(
            object_type=CONTACT_OBJECT,
            fields=[ID_FIELD, 'Name', WORK_EMAIL_FIELD],
            conditions=[build_or_equals(EMAIL_FIELDS, candidate_email)]
        )

    def find_conflict(self, candidate_email: str, exclude_contact_id: Optional[str]) -> bool:
        """
        Check if a contact other than the excluded one uses the address.

        Args:
            candidate_email: Address to look for
            exclude_contact_id: Contact Id allowed to hold the address
                (None when the user is not linked to a contact)

        Returns:
            True if another contact matches on any email field
        """
        result = self.gateway.query(self.build_query(candidate_email))
        if not result.success:
            logger.error(
                f"Duplicate email check failed for contact {exclude_contact_id}: "
                f"{result.failure.message}"
            )
            return self.fail_closed

        for record in result.value.records:
            if record.get(ID_FIELD) != exclude_contact_id:
                logger.info(
                    f"Email already in use by contact {record.get(ID_FIELD)} "
                    f"(excluded: {exclude_contact_id})"
                )
                return True

        return False
