"""Execution layer: protocols and the SQLAlchemy implementation."""

from relatable.sql.base import Model, Resource, SearchBuilder
from relatable.sql.model import SqlModel
from relatable.sql.resource import SqlResource
from relatable.sql.search import SqlSearch, bind_template

__all__ = [
    "Resource",
    "SearchBuilder",
    "Model",
    "SqlResource",
    "SqlSearch",
    "SqlModel",
    "bind_template",
]
