"""
External system integrations (Salesforce REST gateway).
"""
