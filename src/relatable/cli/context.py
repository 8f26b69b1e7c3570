"""CLI context management for database connections and schemas."""

import os
from dataclasses import dataclass, field

from relatable.schema.loader import SchemaRegistry
from relatable.service import SqlService
from relatable.sql.resource import SqlResource


def get_database_url(url: str | None) -> str:
    """Resolve database URL from CLI arg, environment variable, or default.

    Priority:
    1. Explicit URL argument
    2. RELATABLE_URL environment variable
    3. Default: sqlite:///./relatable.db
    """
    if url:
        return url
    if env_url := os.getenv("RELATABLE_URL"):
        return env_url
    return "sqlite:///./relatable.db"


def get_schema_dir(path: str | None) -> str:
    """Resolve schema directory from CLI arg, environment variable, or default.

    Priority:
    1. Explicit path argument
    2. RELATABLE_SCHEMAS environment variable
    3. Default: ./schemas
    """
    if path:
        return path
    if env_path := os.getenv("RELATABLE_SCHEMAS"):
        return env_path
    return "./schemas"


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Creates the resource and schema registry lazily so commands that need
    neither (``version``) work without a database or schema directory.
    """

    database_url: str
    schema_dir: str
    echo: bool
    json_output: bool
    _resource: SqlResource | None = field(default=None, init=False, repr=False)
    _registry: SchemaRegistry | None = field(default=None, init=False, repr=False)

    def get_registry(self) -> SchemaRegistry:
        """Load schema definitions on first use."""
        if self._registry is None:
            self._registry = SchemaRegistry.from_directory(self.schema_dir)
        return self._registry

    def get_resource(self) -> SqlResource:
        """Create the database resource on first use."""
        if self._resource is None:
            self._resource = SqlResource.from_url(self.database_url, echo=self.echo)
        return self._resource

    def get_service(self, schema_name: str) -> SqlService:
        """Service with the named schema attached."""
        schema = self.get_registry().get(schema_name)
        return SqlService(self.get_resource()).set_schema(schema)

    def close(self) -> None:
        """Close database connection if open."""
        if self._resource is not None:
            self._resource.close()
            self._resource = None
