"""
Reusable service functions for the Salesforce contact components.

This package contains SOQL helpers, cache backends, the picklist options
cache, environment-gated debug logging and runtime settings.
"""

__all__ = ['cache', 'debug_log', 'field_options', 'settings', 'soql']
