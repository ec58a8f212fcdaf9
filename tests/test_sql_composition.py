"""Statement builders quote every identifier through psycopg.sql."""
import pytest
from psycopg import sql

from core.models import CollectionSpec, FieldSpec, FieldType
from infrastructure.database_utils import qualified_name, render_sql
from infrastructure.record_reader import build_select
from infrastructure.schema_initializer import build_create_schema, build_create_table
from infrastructure.seed_loader import build_insert


@pytest.fixture
def collection():
    return CollectionSpec(
        name="users",
        natural_key="username",
        fields=[
            FieldSpec(name="username", type=FieldType.VARCHAR, max_length=64),
            FieldSpec(name="email", type=FieldType.TEXT),
        ],
    )


class TestIdentifierQuoting:
    """Namespace names reach the builders as plain strings and must be quoted."""

    def test_namespace_with_statement_terminator(self):
        rendered = build_create_schema("app; DROP SCHEMA public;--").as_string(None)
        assert rendered == 'CREATE SCHEMA IF NOT EXISTS "app; DROP SCHEMA public;--"'

    def test_embedded_quote_is_doubled(self):
        rendered = qualified_name('app"."evil', "users").as_string(None)
        assert rendered == '"app"".""evil"."users"'

    def test_select_quotes_namespace(self, collection):
        rendered = build_select("x; DELETE FROM users", collection).as_string(None)
        assert rendered.endswith('FROM "x; DELETE FROM users"."users"')

    def test_values_are_placeholders_never_literals(self, collection):
        rendered = build_insert("app", collection, 2).as_string(None)
        assert rendered.count("%s") == 4
        assert "'" not in rendered

    def test_constraint_name_is_quoted(self, collection):
        rendered = build_create_table("app", collection).as_string(None)
        assert 'CONSTRAINT "users_username_key" UNIQUE ("username")' in rendered


class TestRenderSql:

    def test_composed_is_rendered(self):
        stmt = sql.SQL("SELECT 1 FROM {}").format(qualified_name("app", "users"))
        assert render_sql(stmt) == 'SELECT 1 FROM "app"."users"'

    def test_plain_string_passes_through(self):
        assert render_sql("SELECT 1") == "SELECT 1"
