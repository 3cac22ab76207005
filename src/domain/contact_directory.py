"""
Salesforce Contact, Account and campaign lookups.

Remote failures never propagate: they are logged and converted to a
fallback value (error code for reads, False/None for writes, empty list for
queries).
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from .models import (
    ACCOUNT_OBJECT,
    CAMPAIGN_MEMBER_OBJECT,
    CONTACT_OBJECT,
    EMAIL_FIELDS,
    ID_FIELD,
    Contact,
)
from integrations.salesforce_gateway import ContactGateway
from services.debug_log import DebugLogger
from services.settings import Settings
from services.soql import SelectQuery, build_or_equals, equals

logger = logging.getLogger(__name__)

EVENT_CAMPAIGN_CONDITION = equals('Campaign_Type__c', 'Event')

# SOQL date literals are zero-padded
SOQL_DATE = re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2}')


class ContactDirectory:
    """
    Read and write Salesforce contacts and their related records.

    Args:
        gateway: Salesforce gateway
        settings: Runtime settings (debug logging flags)
    """

    def __init__(self, gateway: ContactGateway, settings: Optional[Settings] = None):
        self.gateway = gateway
        self.debug_log = DebugLogger('ContactDirectory', settings or Settings())

    def get_contact(self, contact_id: str, log_error: bool = True) -> Union[Contact, int]:
        """
        Read a Contact record.

        Args:
            contact_id: Salesforce Contact Id
            log_error: Log a failed read (default: True)

        Returns:
            Contact, or the remote error code if the read failed
        """
        result = self.gateway.read(contact_id, CONTACT_OBJECT)
        if not result.success:
            if log_error:
                logger.error(f"Failed to read contact {contact_id}: {result.failure.message}")
            return result.failure.code

        self.debug_log('get_contact', result.value)
        return Contact.from_record(result.value)

    def get_contact_by_email(self, email: str) -> Optional[Contact]:
        """
        Find the single Contact using an email address on any email field.

        Returns:
            Contact if exactly one record matches, otherwise None
        """
        query = SelectQuery(
            object_type=CONTACT_OBJECT,
            fields=[ID_FIELD],
            conditions=[build_or_equals(EMAIL_FIELDS, email)]
        )
        result = self.gateway.query(query)
        if not result.success:
            logger.error(f"Contact lookup by email failed: {result.failure.message}")
            return None

        found = result.value
        if not found.is_complete:
            return None
        if found.size > 1:
            logger.error(
                f"Only one Salesforce contact expected for email but found {found.size}"
            )
            return None
        if found.size == 1 and found.records:
            record = found.records[-1]
            self.debug_log('get_contact_by_email', record)
            return Contact.from_record(record)
        return None

    def get_account(self, account_id: str) -> Optional[Dict[str, Any]]:
        """Read an Account record; None if the read failed."""
        result = self.gateway.read(account_id, ACCOUNT_OBJECT)
        if not result.success:
            logger.error(f"Failed to read account {account_id}: {result.failure.message}")
            return None

        self.debug_log('get_account', result.value)
        return result.value

    def create_contact(self, fields: Dict[str, Any]) -> Optional[str]:
        """
        Create a Contact.

        Returns:
            New Contact Id, or None if creation failed
        """
        result = self.gateway.create(fields, CONTACT_OBJECT)
        if not result.success:
            logger.error(f"Failed to create contact: {result.failure.message}")
            return None

        logger.info(f"Created contact {result.value}")
        return result.value

    def update_contact(self, contact_id: str, fields: Dict[str, Any]) -> bool:
        """
        Update a Contact's field values.

        Returns:
            True if the contact was updated, False if there was an error
        """
        result = self.gateway.update(contact_id, fields, CONTACT_OBJECT)
        if not result.success:
            logger.error(f"Failed to update contact {contact_id}: {result.failure.message}")
            return False
        return True

    def get_contact_campaigns(self, contact_id: str) -> List[Dict[str, Any]]:
        """
        Get the event campaigns a contact is a member of, most recent response first.
        """
        query = SelectQuery(
            object_type=CAMPAIGN_MEMBER_OBJECT,
            fields=[ID_FIELD, 'FirstRespondedDate', 'CampaignId', 'Campaign.Name'],
            conditions=[equals('ContactId', contact_id), EVENT_CAMPAIGN_CONDITION],
            order_by='FirstRespondedDate DESC'
        )
        return self._query_records('get_contact_campaigns', query)

    def get_upcoming_contact_campaigns(self, contact_id: str, date: str) -> List[Dict[str, Any]]:
        """
        Get event campaigns of a contact starting after a date, soonest first.

        Args:
            contact_id: Salesforce Contact Id
            date: Date in format "YYYY-MM-DD"

        Raises:
            ValueError: If date is not in YYYY-MM-DD format
        """
        try:
            if not SOQL_DATE.fullmatch(date):
                raise ValueError(date)
            datetime.strptime(date, '%Y-%m-%d')
        except (TypeError, ValueError):
            raise ValueError(f"Campaign date must be in YYYY-MM-DD format, got: '{date}'")

        query = SelectQuery(
            object_type=CAMPAIGN_MEMBER_OBJECT,
            fields=[ID_FIELD, 'CampaignId', 'Campaign.Name', 'Campaign.StartDate', 'Campaign.Status'],
            conditions=[
                equals('ContactId', contact_id),
                EVENT_CAMPAIGN_CONDITION,
                f"Campaign.StartDate > {date}",
            ],
            order_by='Campaign.StartDate ASC'
        )
        return self._query_records('get_upcoming_contact_campaigns', query)

    def _query_records(self, method: str, query: SelectQuery) -> List[Dict[str, Any]]:
        result = self.gateway.query(query)
        if not result.success:
            logger.error(f"{method} failed: {result.failure.message}")
            return []

        records = result.value.records or []
        self.debug_log(method, records)
        return records
