"""
SOQL query helpers.

This module escapes user-supplied literals and assembles read-only SELECT
queries against Salesforce. Every externally supplied value that ends up in a
query string must go through sanitize_soql().
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence


def sanitize_soql(value: Optional[str]) -> str:
    """
    Escape special characters in a value used inside a SOQL string literal.

    Backslashes are doubled first so the escapes inserted for quotes and
    percent signs are not escaped a second time. A literal "+" is sent
    percent-encoded because the query transport would otherwise decode it
    as a space.

    Args:
        value: Text to sanitize (None is treated as empty)

    Returns:
        str: The escaped string

    Example:
        >>> sanitize_soql("o'brien+news@example.com")
        "o\\\\'brien%2Bnews@example.com"
    """
    if value is None:
        return ''

    value = str(value)
    value = value.replace('\\', '\\\\')
    value = value.replace("'", "\\'")
    value = value.replace('"', '\\"')
    value = value.replace('%', '\\%')
    value = value.replace('+', '%2B')
    return value


def equals(field_name: str, value: str) -> str:
    """
    Build a single equality condition with a sanitized string literal.

    Example:
        >>> equals('ContactId', '003xx')
        "ContactId = '003xx'"
    """
    return f"{field_name} = '{sanitize_soql(value)}'"


def build_or_equals(fields: Sequence[str], value: str) -> str:
    """
    Build a parenthesized OR of equality conditions against one value.

    Args:
        fields: Salesforce field names to compare
        value: Raw value (sanitized here)

    Returns:
        str: Condition fragment, e.g. "(A = 'v' OR B = 'v')"

    Raises:
        ValueError: If no fields are given
    """
    if not fields:
        raise ValueError("At least one field is required for an OR condition")

    literal = sanitize_soql(value)
    return '(' + ' OR '.join(f"{name} = '{literal}'" for name in fields) + ')'


@dataclass
class SelectQuery:
    """
    Read-only SOQL SELECT query.

    Conditions are joined with AND. They are expected to be built with
    equals() / build_or_equals() so that literal values are escaped.

    Attributes:
        object_type: Salesforce object to select from (e.g. "Contact")
        fields: Field names to return
        conditions: WHERE clause fragments
        order_by: Optional ORDER BY expression (e.g. "Name DESC")
        limit: Optional row limit
    """
    object_type: str
    fields: List[str] = field(default_factory=lambda: ['Id'])
    conditions: List[str] = field(default_factory=list)
    order_by: Optional[str] = None
    limit: Optional[int] = None

    def to_soql(self) -> str:
        """
        Render the query as SOQL text.

        Raises:
            ValueError: If the object type or field list is empty
        """
        if not self.object_type:
            raise ValueError("SOQL object type cannot be empty")
        if not self.fields:
            raise ValueError("SOQL field list cannot be empty")

        soql = f"SELECT {', '.join(self.fields)} FROM {self.object_type}"
        if self.conditions:
            soql += ' WHERE ' + ' AND '.join(self.conditions)
        if self.order_by:
            soql += f" ORDER BY {self.order_by}"
        if self.limit is not None:
            soql += f" LIMIT {int(self.limit)}"
        return soql

    def __str__(self) -> str:
        return self.to_soql()
