"""
Salesforce Gateway Module

This module is the only I/O boundary to Salesforce. ContactGateway defines the
operations the contact services rely on; SimpleSalesforceGateway implements
them on top of the simple-salesforce REST client.

Every operation returns a GatewayResult. Remote errors (HTTP errors reported by
Salesforce, connection failures) are converted to a failed result carrying a
RemoteFailure and are never raised to the caller.

Usage:
    from integrations.salesforce_gateway import SimpleSalesforceGateway

    gateway = SimpleSalesforceGateway.from_settings(settings)
    result = gateway.read('0035e00000AbCdE')
    if result.success:
        print(result.value['Work_Email__c'])
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict
from urllib.parse import quote

import requests
from simple_salesforce import Salesforce
from simple_salesforce.exceptions import SalesforceError

from domain.models import CONTACT_OBJECT, GatewayResult, QueryResult
from services.settings import Settings
from services.soql import SelectQuery

logger = logging.getLogger(__name__)

UI_API_OBJECT_INFO = 'ui-api/object-info'
PICKLIST_VALUES = 'picklist-values'

# "%2B" written by sanitize_soql() for a "+"; a literal "%2B" in a value is
# escaped as "\%2B" and so follows an odd number of backslashes
SANITIZED_PLUS = re.compile(r'(?<!\\)((?:\\\\)*)%2B')


def encode_soql(soql: str) -> str:
    """
    Percent-encode a SOQL statement for use as the "q" query parameter.

    Args:
        soql: Rendered SOQL, with literals passed through sanitize_soql()

    Returns:
        URL-safe text that decodes to the SOQL with every "+" restored
    """
    return quote(SANITIZED_PLUS.sub(r'\1+', soql), safe='')


# ============================================================================
# Gateway Interface
# ============================================================================

class ContactGateway(ABC):
    """
    Operations required from the Salesforce transport.

    Record values are dicts keyed by Salesforce field name.
    """

    @abstractmethod
    def read(self, record_id: str, object_type: str = CONTACT_OBJECT) -> GatewayResult:
        """Read one record; value is the record dict."""

    @abstractmethod
    def create(self, fields: Dict[str, Any], object_type: str = CONTACT_OBJECT) -> GatewayResult:
        """Create a record; value is the new record Id."""

    @abstractmethod
    def update(self, record_id: str, fields: Dict[str, Any], object_type: str = CONTACT_OBJECT) -> GatewayResult:
        """Update fields on a record; value is True."""

    @abstractmethod
    def query(self, query: SelectQuery) -> GatewayResult:
        """Run a SOQL query; value is a QueryResult."""

    @abstractmethod
    def fetch_object_metadata(self, object_type: str) -> GatewayResult:
        """Fetch UI API object info; value contains "defaultRecordTypeId"."""

    @abstractmethod
    def fetch_field_metadata(self, object_type: str, record_type_id: str, field_name: str) -> GatewayResult:
        """Fetch picklist values; value contains "values": [{"value", "label"}]."""


# ============================================================================
# simple-salesforce Implementation
# ============================================================================

class SimpleSalesforceGateway(ContactGateway):
    """
    ContactGateway backed by a simple_salesforce.Salesforce client.

    Args:
        sf: Authenticated Salesforce client
    """

    def __init__(self, sf: Salesforce):
        self.sf = sf

    @classmethod
    def from_settings(cls, settings: Settings) -> 'SimpleSalesforceGateway':
        """
        Log in with the credentials from settings.

        Raises:
            ValueError: If credentials are missing
        """
        if not settings.salesforce_username or not settings.salesforce_password:
            raise ValueError(
                "SALESFORCE_USERNAME and SALESFORCE_PASSWORD environment variables are required"
            )

        sf = Salesforce(
            username=settings.salesforce_username,
            password=settings.salesforce_password,
            security_token=settings.salesforce_security_token,
            domain=settings.salesforce_domain
        )
        logger.info(f"Salesforce client initialized: domain={settings.salesforce_domain}")
        return cls(sf)

    def _call(self, operation: str, func: Callable[[], Any]) -> GatewayResult:
        """Run a client call and convert remote errors to a failed result."""
        try:
            return GatewayResult.ok(func())
        except SalesforceError as e:
            code = getattr(e, 'status', None) or getattr(e, 'code', None) or 0
            logger.debug(f"Salesforce {operation} failed (status={code}): {e}")
            return GatewayResult.fail(str(e), code=_as_int(code))
        except requests.exceptions.RequestException as e:
            logger.debug(f"Salesforce {operation} failed (transport error): {e}")
            return GatewayResult.fail(str(e), code=0)

    def read(self, record_id: str, object_type: str = CONTACT_OBJECT) -> GatewayResult:
        sobject = getattr(self.sf, object_type)
        result = self._call(f"read {object_type}", lambda: sobject.get(record_id))
        if result.success:
            result.value = dict(result.value or {})
            result.value.pop('attributes', None)
        return result

    def create(self, fields: Dict[str, Any], object_type: str = CONTACT_OBJECT) -> GatewayResult:
        sobject = getattr(self.sf, object_type)
        result = self._call(f"create {object_type}", lambda: sobject.create(fields))
        if not result.success:
            return result

        response = result.value or {}
        if not response.get('success', True) or not response.get('id'):
            errors = response.get('errors') or ['No record id returned']
            return GatewayResult.fail(f"Create {object_type} rejected: {errors}")
        return GatewayResult.ok(response['id'])

    def update(self, record_id: str, fields: Dict[str, Any], object_type: str = CONTACT_OBJECT) -> GatewayResult:
        sobject = getattr(self.sf, object_type)
        result = self._call(f"update {object_type}", lambda: sobject.update(record_id, fields))
        if result.success:
            result.value = True
        return result

    def query(self, query: SelectQuery) -> GatewayResult:
        soql = query.to_soql()
        # "&", "#" and "%" inside literals must not end the q parameter
        path = f"query/?q={encode_soql(soql)}"
        result = self._call('query', lambda: self.sf.restful(path))
        if not result.success:
            return result

        response = result.value or {}
        records = []
        for record in response.get('records', []):
            record = dict(record)
            record.pop('attributes', None)
            records.append(record)

        return GatewayResult.ok(QueryResult(
            records=records,
            is_complete=bool(response.get('done', True)),
            size=int(response.get('totalSize', len(records)))
        ))

    def fetch_object_metadata(self, object_type: str) -> GatewayResult:
        path = f"{UI_API_OBJECT_INFO}/{object_type}"
        return self._call(f"object info {object_type}", lambda: self.sf.restful(path) or {})

    def fetch_field_metadata(self, object_type: str, record_type_id: str, field_name: str) -> GatewayResult:
        path = f"{UI_API_OBJECT_INFO}/{object_type}/{PICKLIST_VALUES}/{record_type_id}/{field_name}"
        return self._call(
            f"picklist values {object_type}.{field_name}",
            lambda: self.sf.restful(path) or {}
        )


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
