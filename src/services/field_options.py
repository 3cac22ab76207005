"""
Picklist options for Salesforce fields.

Option lists are fetched from the UI API for the object's default record type
and cached with a TTL (default: 10 minutes):

Priority: Cache -> Salesforce object info -> Salesforce picklist values

Nothing is cached when the object has no default record type or when a remote
call fails, so both cases are retried on the next lookup. Concurrent misses may
each fetch and write; the last write wins.
"""

import logging
import time
from typing import Callable, Dict, Optional

from domain.models import CONTACT_OBJECT
from integrations.salesforce_gateway import ContactGateway
from .cache import CacheBackend, InMemoryCacheBackend, build_cache_backend
from .debug_log import DebugLogger
from .settings import DEFAULT_FIELD_OPTIONS_TTL_SECONDS, Settings

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = 'salesforce_contacts'


def cache_key(object_type: str, field_name: str) -> str:
    """Cache key for a picklist, e.g. "salesforce_contacts:Contact:Status__c"."""
    return f"{CACHE_NAMESPACE}:{object_type}:{field_name}"


class FieldOptionsCache:
    """
    Cached value->label mappings for Salesforce picklist fields.

    Args:
        gateway: Salesforce gateway used on cache misses
        backend: Cache backend (defaults to the in-memory backend)
        ttl_seconds: Entry lifetime in seconds
        clock: Returns the current epoch time (defaults to time.time)
        debug_log: Debug logger for fetched metadata
    """

    def __init__(
        self,
        gateway: ContactGateway,
        backend: Optional[CacheBackend] = None,
        ttl_seconds: int = DEFAULT_FIELD_OPTIONS_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        debug_log: Optional[DebugLogger] = None
    ):
        self.gateway = gateway
        self.backend = backend or InMemoryCacheBackend(clock=clock)
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.debug_log = debug_log or DebugLogger('FieldOptionsCache', Settings())

    @classmethod
    def from_settings(
        cls,
        gateway: ContactGateway,
        settings: Settings,
        backend: Optional[CacheBackend] = None
    ) -> 'FieldOptionsCache':
        return cls(
            gateway,
            backend=backend or build_cache_backend(settings),
            ttl_seconds=settings.field_options_ttl_seconds,
            debug_log=DebugLogger('FieldOptionsCache', settings)
        )

    def get_options(self, object_type: str, field_name: str) -> Dict[str, str]:
        """
        Get the options of a picklist field.

        Args:
            object_type: Salesforce object (e.g. "Contact")
            field_name: Picklist field name (e.g. "Status__c")

        Returns:
            Dict of value -> label in the order Salesforce returned them;
            empty if the options could not be loaded
        """
        key = cache_key(object_type, field_name)

        cached = self.backend.get(key)
        if cached is not None:
            logger.info(f"Using cached picklist options: {key}")
            return dict(cached)

        object_info = self.gateway.fetch_object_metadata(object_type)
        if not object_info.success:
            logger.error(
                f"Failed to fetch object info for {object_type}: {object_info.failure.message}"
            )
            return {}

        record_type_id = (object_info.value or {}).get('defaultRecordTypeId')
        if not record_type_id:
            # Misconfigured object, not an operational fault; retried next call
            return {}

        field_info = self.gateway.fetch_field_metadata(object_type, record_type_id, field_name)
        if not field_info.success:
            logger.error(
                f"Failed to fetch picklist values for {object_type}.{field_name}: "
                f"{field_info.failure.message}"
            )
            return {}

        self.debug_log('get_options', field_info.value)

        options = {}
        for item in (field_info.value or {}).get('values', []):
            options[item['value']] = item['label']

        self.backend.set(key, options, self.clock() + self.ttl_seconds)
        logger.info(
            f"Cached {len(options)} picklist option(s) for {key} "
            f"(TTL: {self.ttl_seconds}s)"
        )
        return dict(options)

    def get_contact_options(self, field_name: str) -> Dict[str, str]:
        """Get the options of a Contact picklist field."""
        return self.get_options(CONTACT_OBJECT, field_name)
