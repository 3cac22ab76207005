"""
Domain layer for Salesforce contact reconciliation.

This layer contains:
- Data models (type-safe structures, Salesforce field names)
- Business logic (email reconciliation rules, duplicate detection)
- Result types (explicit success/failure handling)
"""
