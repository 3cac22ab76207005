"""
Runtime configuration for the Salesforce contact services.

Values are read from environment variables once and passed explicitly to the
components that need them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

LIVE_ENVIRONMENT = 'live'

# Picklist options are cached for 10 minutes by default
DEFAULT_FIELD_OPTIONS_TTL_SECONDS = 600

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _as_bool(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in _TRUE_VALUES


@dataclass
class Settings:
    """
    Configuration for the contact reconciliation components.

    Attributes:
        environment: Deployment environment name (e.g. "dev", "live")
        extra_debugging: Mirror debug data to the secondary debugging sink
        field_options_ttl_seconds: Lifetime of cached picklist options
        cache_table_name: DynamoDB table for the shared cache (empty = in-memory)
        duplicate_check_fail_closed: Treat duplicate-check errors as conflicts
        salesforce_username: API user name
        salesforce_password: API user password
        salesforce_security_token: API user security token
        salesforce_domain: "login" for production, "test" for sandboxes
    """
    environment: str = 'dev'
    extra_debugging: bool = False
    field_options_ttl_seconds: int = DEFAULT_FIELD_OPTIONS_TTL_SECONDS
    cache_table_name: str = ''
    duplicate_check_fail_closed: bool = False
    salesforce_username: str = ''
    salesforce_password: str = ''
    salesforce_security_token: str = ''
    salesforce_domain: str = 'login'

    @property
    def is_live_environment(self) -> bool:
        """Debug logging is suppressed on the live environment."""
        return self.environment == LIVE_ENVIRONMENT

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings

        Raises:
            ValueError: If FIELD_OPTIONS_CACHE_TTL is not a non-negative integer
        """
        env = os.environ if environ is None else environ

        ttl_raw = env.get('FIELD_OPTIONS_CACHE_TTL', str(DEFAULT_FIELD_OPTIONS_TTL_SECONDS))
        try:
            ttl = int(ttl_raw)
        except ValueError:
            raise ValueError(f"FIELD_OPTIONS_CACHE_TTL must be an integer, got: '{ttl_raw}'")
        if ttl < 0:
            raise ValueError(f"FIELD_OPTIONS_CACHE_TTL cannot be negative, got: {ttl}")

        settings = cls(
            environment=env.get('ENVIRONMENT', 'dev'),
            extra_debugging=_as_bool(env.get('SALESFORCE_EXTRA_DEBUGGING')),
            field_options_ttl_seconds=ttl,
            cache_table_name=env.get('FIELD_OPTIONS_CACHE_TABLE', ''),
            duplicate_check_fail_closed=_as_bool(env.get('DUPLICATE_CHECK_FAIL_CLOSED')),
            salesforce_username=env.get('SALESFORCE_USERNAME', ''),
            salesforce_password=env.get('SALESFORCE_PASSWORD', ''),
            salesforce_security_token=env.get('SALESFORCE_SECURITY_TOKEN', ''),
            salesforce_domain=env.get('SALESFORCE_DOMAIN', 'login'),
        )
        logger.info(
            f"Settings loaded: environment={settings.environment}, "
            f"extra_debugging={settings.extra_debugging}, "
            f"field_options_ttl={settings.field_options_ttl_seconds}s, "
            f"cache_table={settings.cache_table_name or '(in-memory)'}"
        )
        return settings
