"""
Shared cache backends with expiry.

Two backends implement the same small interface:
1. InMemoryCacheBackend - module-level dict, reused across warm invocations
2. DynamoDBCacheBackend - DynamoDB table with a numeric TTL attribute, shared
   across processes

Entries carry an absolute expiry timestamp (epoch seconds). Expired entries are
reported as misses even if the store has not removed them yet.
"""

import json
import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .settings import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

# Configure DynamoDB client with timeouts to prevent infinite hangs
dynamodb_config = Config(
    retries={
        'max_attempts': 1,  # 1 attempt total (no retries)
        'mode': 'standard'
    },
    connect_timeout=5,  # 5 seconds to establish connection
    read_timeout=10     # 10 seconds max for reading response
)

# Module-level store shared by in-memory backends: {key: (value, expires_at)}
_memory_cache: Dict[str, Tuple[Any, float]] = {}


class CacheBackend(ABC):
    """Key/value store with absolute expiry times."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or expired entry."""

    @abstractmethod
    def set(self, key: str, value: Any, expires_at: float) -> None:
        """Store a value until the given epoch timestamp."""


class InMemoryCacheBackend(CacheBackend):
    """
    Process-local cache backed by a module-level dict.

    Args:
        clock: Returns the current epoch time (defaults to time.time)
        store: Dict to use instead of the shared module-level store
    """

    def __init__(self, clock: Clock = time.time, store: Optional[Dict[str, Tuple[Any, float]]] = None):
        self.clock = clock
        self.store = _memory_cache if store is None else store

    def get(self, key: str) -> Optional[Any]:
        entry = self.store.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self.clock() > expires_at:
            logger.info(f"Cache entry expired: {key}")
            return None
        return value

    def set(self, key: str, value: Any, expires_at: float) -> None:
        self.store[key] = (value, expires_at)


class DynamoDBCacheBackend(CacheBackend):
    """
    Cache stored in a DynamoDB table.

    Table layout: partition key "cache_key" (S), JSON payload in "data" (S) and
    the expiry in "expires_at" (N), which should be configured as the table's
    TTL attribute.

    Errors from DynamoDB are logged and treated as a miss (get) or a skipped
    write (set); the cache never fails the caller.

    Args:
        table_name: DynamoDB table name
        client: boto3 DynamoDB client (created on first use if omitted)
        clock: Returns the current epoch time (defaults to time.time)
    """

    def __init__(self, table_name: str, client: Any = None, clock: Clock = time.time):
        if not table_name:
            raise ValueError("DynamoDB cache table name cannot be empty")

        self.table_name = table_name
        self.clock = clock
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client('dynamodb', config=dynamodb_config)
            logger.info(
                f"DynamoDB cache client initialized for table {self.table_name} "
                f"with timeouts: connect=5s, read=10s, max_attempts=1"
            )
        return self._client

    def get(self, key: str) -> Optional[Any]:
        try:
            response = self.client.get_item(
                TableName=self.table_name,
                Key={'cache_key': {'S': key}},
                ConsistentRead=True
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to read cache entry {key} from {self.table_name}: {e}")
            return None

        item = response.get('Item')
        if not item:
            return None

        # TTL deletion in DynamoDB is lazy, so check expiry ourselves
        expires_at = float(item.get('expires_at', {}).get('N', '0'))
        if self.clock() > expires_at:
            logger.info(f"Cache entry expired: {key}")
            return None

        try:
            return json.loads(item['data']['S'])
        except (KeyError, ValueError) as e:
            logger.error(f"Corrupt cache entry {key} in {self.table_name}: {e}")
            return None

    def set(self, key: str, value: Any, expires_at: float) -> None:
        try:
            self.client.put_item(
                TableName=self.table_name,
                Item={
                    'cache_key': {'S': key},
                    'data': {'S': json.dumps(value)},
                    'expires_at': {'N': str(math.ceil(expires_at))},
                }
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to write cache entry {key} to {self.table_name}: {e}")


def build_cache_backend(settings: Settings, clock: Clock = time.time) -> CacheBackend:
    """
    Choose the cache backend for the given settings.

    Returns:
        DynamoDBCacheBackend when a cache table is configured,
        InMemoryCacheBackend otherwise
    """
    if settings.cache_table_name:
        return DynamoDBCacheBackend(settings.cache_table_name, clock=clock)
    return InMemoryCacheBackend(clock=clock)


def clear_memory_cache() -> None:
    """
    Clear the shared in-memory cache.

    Useful for testing or forcing a reload from Salesforce.
    """
    _memory_cache.clear()
    logger.info("In-memory cache cleared")
