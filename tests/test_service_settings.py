"""
Tests for runtime settings.
"""

import pytest
from unittest.mock import patch
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from services.settings import Settings


class TestSettingsFromEnviron:
    """Test reading settings from environment variables."""

    def test_defaults(self):
        settings = Settings.from_environ({})

        assert settings.environment == 'dev'
        assert settings.is_live_environment is False
        assert settings.extra_debugging is False
        assert settings.field_options_ttl_seconds == 600
        assert settings.cache_table_name == ''
        assert settings.duplicate_check_fail_closed is False
        assert settings.salesforce_domain == 'login'

    def test_all_values(self):
        settings = Settings.from_environ({
            'ENVIRONMENT': 'live',
            'SALESFORCE_EXTRA_DEBUGGING': 'true',
            'FIELD_OPTIONS_CACHE_TTL': '120',
            'FIELD_OPTIONS_CACHE_TABLE': 'field-options',
            'DUPLICATE_CHECK_FAIL_CLOSED': 'YES',
            'SALESFORCE_USERNAME': 'api@example.org',
            'SALESFORCE_PASSWORD': 'secret',
            'SALESFORCE_SECURITY_TOKEN': 'token',
            'SALESFORCE_DOMAIN': 'test',
        })

        assert settings.is_live_environment is True
        assert settings.extra_debugging is True
        assert settings.field_options_ttl_seconds == 120
        assert settings.cache_table_name == 'field-options'
        assert settings.duplicate_check_fail_closed is True
        assert settings.salesforce_username == 'api@example.org'
        assert settings.salesforce_domain == 'test'

    @pytest.mark.parametrize('value', ['0', 'false', 'no', ''])
    def test_false_flags(self, value):
        assert Settings.from_environ({'SALESFORCE_EXTRA_DEBUGGING': value}).extra_debugging is False

    def test_invalid_ttl(self):
        with pytest.raises(ValueError, match="must be an integer"):
            Settings.from_environ({'FIELD_OPTIONS_CACHE_TTL': 'ten minutes'})

    def test_negative_ttl(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            Settings.from_environ({'FIELD_OPTIONS_CACHE_TTL': '-1'})

    @patch.dict(os.environ, {'ENVIRONMENT': 'staging'})
    def test_reads_os_environ_by_default(self):
        assert Settings.from_environ().environment == 'staging'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
