"""
Tests for the picklist options cache.
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import GatewayResult
from services.cache import InMemoryCacheBackend
from services.field_options import FieldOptionsCache, cache_key
from services.settings import Settings


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


PICKLIST_RESPONSE = {
    'values': [
        {'value': 'Teacher', 'label': 'Teacher', 'validFor': []},
        {'value': 'School or District Leader', 'label': 'School / District Leader', 'validFor': []},
        {'value': 'Other Educator', 'label': 'Other Educator', 'validFor': []},
    ]
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def options_gateway(gateway):
    gateway.fetch_object_metadata.return_value = GatewayResult.ok({'defaultRecordTypeId': '012000000000000AAA'})
    gateway.fetch_field_metadata.return_value = GatewayResult.ok(PICKLIST_RESPONSE)
    return gateway


def _cache(gateway, clock):
    return FieldOptionsCache(gateway, backend=InMemoryCacheBackend(clock=clock, store={}), clock=clock)


class TestGetOptions:
    """Test picklist lookup and caching."""

    def test_fetch_builds_ordered_mapping(self, options_gateway, clock):
        options = _cache(options_gateway, clock).get_options('Contact', 'Role__c')

        assert list(options.items()) == [
            ('Teacher', 'Teacher'),
            ('School or District Leader', 'School / District Leader'),
            ('Other Educator', 'Other Educator'),
        ]
        options_gateway.fetch_object_metadata.assert_called_once_with('Contact')
        options_gateway.fetch_field_metadata.assert_called_once_with(
            'Contact', '012000000000000AAA', 'Role__c'
        )

    def test_second_call_uses_cache(self, options_gateway, clock):
        field_cache = _cache(options_gateway, clock)

        first = field_cache.get_options('Contact', 'Role__c')
        clock.now += 600
        second = field_cache.get_options('Contact', 'Role__c')

        assert first == second
        assert options_gateway.fetch_field_metadata.call_count == 1

    def test_refetch_after_ttl(self, options_gateway, clock):
        field_cache = _cache(options_gateway, clock)

        field_cache.get_options('Contact', 'Role__c')
        clock.now += 601
        field_cache.get_options('Contact', 'Role__c')

        assert options_gateway.fetch_field_metadata.call_count == 2

    def test_custom_ttl(self, options_gateway, clock):
        field_cache = FieldOptionsCache(
            options_gateway,
            backend=InMemoryCacheBackend(clock=clock, store={}),
            ttl_seconds=60,
            clock=clock
        )

        field_cache.get_options('Contact', 'Role__c')
        clock.now += 61
        field_cache.get_options('Contact', 'Role__c')

        assert options_gateway.fetch_object_metadata.call_count == 2

    def test_no_default_record_type_is_never_cached(self, options_gateway, clock, caplog):
        options_gateway.fetch_object_metadata.return_value = GatewayResult.ok({'defaultRecordTypeId': None})
        field_cache = _cache(options_gateway, clock)

        with caplog.at_level('ERROR'):
            assert field_cache.get_options('Contact', 'Status__c') == {}
            assert field_cache.get_options('Contact', 'Status__c') == {}

        assert options_gateway.fetch_object_metadata.call_count == 2
        options_gateway.fetch_field_metadata.assert_not_called()
        assert caplog.text == ''

    def test_object_info_failure_not_cached(self, options_gateway, clock, caplog):
        options_gateway.fetch_object_metadata.return_value = GatewayResult.fail('Session expired', code=401)
        field_cache = _cache(options_gateway, clock)

        with caplog.at_level('ERROR'):
            assert field_cache.get_options('Contact', 'Role__c') == {}

        assert 'Session expired' in caplog.text

        options_gateway.fetch_object_metadata.return_value = GatewayResult.ok(
            {'defaultRecordTypeId': '012000000000000AAA'}
        )
        assert len(field_cache.get_options('Contact', 'Role__c')) == 3

    def test_picklist_failure_not_cached(self, options_gateway, clock):
        options_gateway.fetch_field_metadata.return_value = GatewayResult.fail('Bad field', code=404)
        field_cache = _cache(options_gateway, clock)

        assert field_cache.get_options('Contact', 'Missing__c') == {}
        assert field_cache.get_options('Contact', 'Missing__c') == {}
        assert options_gateway.fetch_field_metadata.call_count == 2

    def test_keys_are_per_object_and_field(self, options_gateway, clock):
        field_cache = _cache(options_gateway, clock)

        field_cache.get_options('Contact', 'Role__c')
        field_cache.get_options('Contact', 'Grade__c')
        field_cache.get_options('Account', 'Role__c')

        assert options_gateway.fetch_field_metadata.call_count == 3

    def test_get_contact_options(self, options_gateway, clock):
        _cache(options_gateway, clock).get_contact_options('Role__c')

        options_gateway.fetch_object_metadata.assert_called_once_with('Contact')

    def test_cached_copy_not_mutated_by_caller(self, options_gateway, clock):
        field_cache = _cache(options_gateway, clock)

        field_cache.get_options('Contact', 'Role__c')['Injected'] = 'x'

        assert 'Injected' not in field_cache.get_options('Contact', 'Role__c')


class TestCacheKey:
    """Test cache key namespacing."""

    def test_cache_key(self):
        assert cache_key('Contact', 'Status__c') == 'salesforce_contacts:Contact:Status__c'


class TestFromSettings:
    """Test construction from settings."""

    def test_ttl_from_settings(self, gateway):
        field_cache = FieldOptionsCache.from_settings(gateway, Settings(field_options_ttl_seconds=120))

        assert field_cache.ttl_seconds == 120
        assert isinstance(field_cache.backend, InMemoryCacheBackend)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
