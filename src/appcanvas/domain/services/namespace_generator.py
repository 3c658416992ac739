"""Namespace id generator service.

Generates the physical storage namespace id of a new logical database
from its owner id, its name and the creation time.
"""

import re
import time


class NamespaceGenerator:
    """Generate storage namespace ids.

    Format: ``udb_{ownerShort}_{nameShort}_{timeShort}`` where

    - ownerShort is the last 8 characters of the owner id
    - nameShort is the sanitized name, at most 15 characters
    - timeShort is the last 6 digits of the Unix time in milliseconds
    """

    PREFIX = "udb"
    OWNER_LENGTH = 8
    NAME_LENGTH = 15
    TIME_LENGTH = 6

    # Owner ids are opaque, so the owner segment may hold any character
    VALID_NAMESPACE_PATTERN = re.compile(r"^udb_.{0,8}_[a-z0-9_]{0,15}_\d{1,6}$", re.DOTALL)

    @classmethod
    def sanitize_name(cls, name: str) -> str:
        """Reduce a database name to its namespace fragment.

        Examples:
            >>> NamespaceGenerator.sanitize_name("Sales")
            'sales'
            >>> NamespaceGenerator.sanitize_name("  Q3 Sales -- Europe!  ")
            'q3_sales_europe'
            >>> NamespaceGenerator.sanitize_name("Customer Relationship Data")
            'customer_relati'
        """
        short = re.sub(r"[^a-z0-9]", "_", name.lower())
        short = re.sub(r"_+", "_", short)
        short = short.strip("_")
        return short[: cls.NAME_LENGTH]

    @classmethod
    def generate(cls, owner_id: str, name: str, timestamp_ms: int | None = None) -> str:
        """Generate a namespace id.

        Args:
            owner_id: The owning user's id.
            name: The database display name.
            timestamp_ms: Unix time in milliseconds; defaults to now.

        Returns:
            The namespace id.

        Examples:
            >>> NamespaceGenerator.generate("6651f0c2a9e4b7d012345678", "Sales", 1718000123456)
            'udb_12345678_sales_123456'
        """
        if timestamp_ms is None:
            timestamp_ms = time.time_ns() // 1_000_000

        owner_short = owner_id[-cls.OWNER_LENGTH :]
        name_short = cls.sanitize_name(name)
        time_short = str(timestamp_ms)[-cls.TIME_LENGTH :]
        return f"{cls.PREFIX}_{owner_short}_{name_short}_{time_short}"

    @classmethod
    def is_valid(cls, namespace: str) -> bool:
        """Check whether a string has the shape of a generated namespace id."""
        return bool(cls.VALID_NAMESPACE_PATTERN.match(namespace))
