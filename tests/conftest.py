"""Shared test fixtures for relatable."""

import json
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import text

from relatable import SchemaRegistry, SqlResource, SqlService

POST = {
    "name": "post",
    "primary": "post_id",
    "fields": [
        {"name": "post_title", "type": "text", "searchable": True},
        {"name": "post_body", "type": "textarea", "searchable": True},
        {"name": "post_slug", "type": "uuid"},
        {"name": "post_meta", "type": "json"},
        {"name": "post_active", "type": "active"},
        {"name": "post_created", "type": "created"},
        {"name": "post_updated", "type": "updated"},
    ],
    "relations": [
        {"name": "tag", "many": 3},
        {"name": "post", "many": 2},
    ],
}

TAG = {
    "name": "tag",
    "primary": "tag_id",
    "fields": [{"name": "tag_name", "type": "text", "searchable": True}],
}

PROFILE = {
    "name": "profile",
    "primary": "profile_id",
    "fields": [
        {"name": "profile_name", "type": "text"},
        {"name": "profile_active", "type": "active"},
    ],
    "relations": [{"name": "post", "many": 2}],
}

ACCOUNT = {
    "name": "account",
    "primary": "account_id",
    "fields": [{"name": "account_name", "type": "text"}],
    "relations": [
        {"name": "profile", "many": 1},
        {"name": "address", "many": 0},
    ],
}

ADDRESS = {
    "name": "address",
    "primary": "address_id",
    "fields": [{"name": "address_label", "type": "text"}],
}

DEFINITIONS = [POST, TAG, PROFILE, ACCOUNT, ADDRESS]

DDL = [
    """CREATE TABLE post (
        post_id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_title VARCHAR(255),
        post_body TEXT,
        post_slug VARCHAR(64),
        post_meta TEXT,
        post_active INTEGER DEFAULT 1,
        post_created DATETIME,
        post_updated DATETIME
    )""",
    """CREATE TABLE tag (
        tag_id INTEGER PRIMARY KEY AUTOINCREMENT,
        tag_name VARCHAR(255)
    )""",
    """CREATE TABLE post_tag (
        post_id INTEGER NOT NULL REFERENCES post (post_id) ON DELETE CASCADE,
        tag_id INTEGER NOT NULL REFERENCES tag (tag_id) ON DELETE CASCADE,
        PRIMARY KEY (post_id, tag_id)
    )""",
    """CREATE TABLE post_post (
        post_id_1 INTEGER NOT NULL REFERENCES post (post_id) ON DELETE CASCADE,
        post_id_2 INTEGER NOT NULL REFERENCES post (post_id) ON DELETE CASCADE
    )""",
    """CREATE TABLE profile (
        profile_id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_name VARCHAR(255),
        profile_active INTEGER DEFAULT 1
    )""",
    """CREATE TABLE profile_post (
        profile_id INTEGER NOT NULL REFERENCES profile (profile_id) ON DELETE CASCADE,
        post_id INTEGER NOT NULL REFERENCES post (post_id) ON DELETE CASCADE
    )""",
    """CREATE TABLE account (
        account_id INTEGER PRIMARY KEY AUTOINCREMENT,
        account_name VARCHAR(255)
    )""",
    """CREATE TABLE account_profile (
        account_id INTEGER NOT NULL REFERENCES account (account_id) ON DELETE CASCADE,
        profile_id INTEGER NOT NULL REFERENCES profile (profile_id) ON DELETE CASCADE
    )""",
    """CREATE TABLE address (
        address_id INTEGER PRIMARY KEY AUTOINCREMENT,
        address_label VARCHAR(255)
    )""",
    """CREATE TABLE account_address (
        account_id INTEGER NOT NULL REFERENCES account (account_id) ON DELETE CASCADE,
        address_id INTEGER NOT NULL REFERENCES address (address_id) ON DELETE CASCADE
    )""",
]


def create_tables(resource: SqlResource) -> None:
    """Create the blog tables used across tests."""
    with resource.engine.begin() as conn:
        for statement in DDL:
            conn.execute(text(statement))


@pytest.fixture
def definitions() -> list[dict[str, Any]]:
    """Schema definitions for a small blog: posts, tags, profiles, accounts."""
    return [dict(d) for d in DEFINITIONS]


@pytest.fixture
def registry(definitions: list[dict[str, Any]]) -> SchemaRegistry:
    return SchemaRegistry(definitions)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """SQLite file URL.

    A file database is used instead of :memory: so every pooled connection
    sees the same tables.
    """
    return f"sqlite:///{tmp_path / 'relatable.db'}"


@pytest.fixture
def resource(db_url: str) -> Generator[SqlResource, None, None]:
    """Resource with the blog tables created."""
    res = SqlResource.from_url(db_url)
    create_tables(res)
    yield res
    res.close()


@pytest.fixture
def blog_db(db_url: str) -> str:
    """Database URL with the blog tables created, for CLI tests."""
    res = SqlResource.from_url(db_url)
    create_tables(res)
    res.close()
    return db_url


@pytest.fixture
def posts(resource: SqlResource, registry: SchemaRegistry) -> SqlService:
    """Service with the post schema attached."""
    return SqlService(resource).set_schema(registry.get("post"))


@pytest.fixture
def tags(resource: SqlResource, registry: SchemaRegistry) -> SqlService:
    return SqlService(resource).set_schema(registry.get("tag"))


@pytest.fixture
def schema_dir(tmp_path: Path, definitions: list[dict[str, Any]]) -> Path:
    """Directory holding one JSON file per schema definition."""
    directory = tmp_path / "schemas"
    directory.mkdir()
    for definition in definitions:
        (directory / f"{definition['name']}.json").write_text(json.dumps(definition))
    return directory


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment.

    Tests using this fixture are skipped when it is not set.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")
    return url


__all__ = ["create_tables", "DEFINITIONS"]
