"""Physical container naming and DDL.

Each table of a logical database is stored in its own container inside the
database's namespace. Containers hold schemaless JSON documents: column
definitions live only in the metadata store.
"""

import re

from appcanvas.core.exceptions import InternalError

VALID_CONTAINER_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

# System columns of every container
SYSTEM_COLUMNS = [
    ("id", "TEXT PRIMARY KEY"),
    ("data", "TEXT NOT NULL DEFAULT '{}'"),
]


class ContainerBuilder:
    """Builds container names and DDL for record containers."""

    @classmethod
    def generate_container_name(cls, table_id: str) -> str:
        """Generate the container name for a table.

        Derived from the table id rather than its name, so renamed or
        re-created tables never collide and names differing only in case
        stay distinct.

        Args:
            table_id: The table id (UUID string).

        Returns:
            The container name.
        """
        return "tbl_" + re.sub(r"[^A-Za-z0-9]", "", table_id).lower()

    @classmethod
    def quote(cls, container: str) -> str:
        """Quote a container name for SQL, rejecting unexpected characters."""
        if not VALID_CONTAINER_PATTERN.match(container):
            raise InternalError(f"Invalid container name: {container!r}")
        return f'"{container}"'

    @classmethod
    def build_create_container_ddl(cls, container: str) -> str:
        columns_sql = ", ".join(f'"{col}" {col_type}' for col, col_type in SYSTEM_COLUMNS)
        return f"CREATE TABLE IF NOT EXISTS {cls.quote(container)} ({columns_sql});"

    @classmethod
    def build_drop_container_ddl(cls, container: str) -> str:
        return f"DROP TABLE IF EXISTS {cls.quote(container)};"
