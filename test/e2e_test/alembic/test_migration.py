"""End-to-end tests for the Alembic migration scripts.

The migrations are applied to a throwaway SQLite database and the resulting
schema is compared with the ORM metadata the application runs on.
"""

import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from storefront.core.database import Base
from storefront.core.database import entities  # noqa: F401

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
VERSIONS_DIR = PROJECT_ROOT / "alembic" / "versions"

STORE_TABLES = {"users", "categories", "products", "product_reviews", "orders", "order_items"}


def _load_revisions():
    revisions = []
    for path in sorted(VERSIONS_DIR.glob("*.py")):
        spec = importlib.util.spec_from_file_location(f"migration_{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        revisions.append(module)
    return revisions


@pytest.fixture
def engine(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrations.db'}")
    yield engine
    engine.dispose()


def _run(engine, step: str) -> None:
    revisions = _load_revisions()
    if step == "downgrade":
        revisions = list(reversed(revisions))
    with engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            for revision in revisions:
                getattr(revision, step)()


class TestRevisionChain:
    def test_single_head(self):
        revisions = _load_revisions()
        assert revisions, "no migration scripts found"
        ids = {r.revision for r in revisions}
        parents = {r.down_revision for r in revisions}
        assert len(ids - parents) == 1
        assert [r.down_revision for r in revisions].count(None) == 1


class TestUpgrade:
    def test_creates_store_tables(self, engine):
        _run(engine, "upgrade")
        assert STORE_TABLES <= set(sa.inspect(engine).get_table_names())

    def test_columns_match_entities(self, engine):
        _run(engine, "upgrade")
        inspector = sa.inspect(engine)
        for table in Base.metadata.sorted_tables:
            migrated = {c["name"]: c for c in inspector.get_columns(table.name)}
            assert set(migrated) == {c.name for c in table.columns}, table.name
            for column in table.columns:
                if column.primary_key:
                    continue
                assert migrated[column.name]["nullable"] == column.nullable, f"{table.name}.{column.name}"

    def test_indexes_match_entities(self, engine):
        _run(engine, "upgrade")
        inspector = sa.inspect(engine)
        for table in Base.metadata.sorted_tables:
            migrated = {ix["name"] for ix in inspector.get_indexes(table.name)}
            expected = {ix.name for ix in table.indexes}
            assert expected <= migrated, table.name

    def test_owner_links_are_nullable(self, engine):
        _run(engine, "upgrade")
        inspector = sa.inspect(engine)
        orders = {c["name"]: c for c in inspector.get_columns("orders")}
        items = {c["name"]: c for c in inspector.get_columns("order_items")}
        assert orders["user_id"]["nullable"] is True
        assert items["product_id"]["nullable"] is True


class TestDowngrade:
    def test_drops_everything(self, engine):
        _run(engine, "upgrade")
        _run(engine, "downgrade")
        assert not STORE_TABLES & set(sa.inspect(engine).get_table_names())

    def test_upgrade_after_downgrade(self, engine):
        _run(engine, "upgrade")
        _run(engine, "downgrade")
        _run(engine, "upgrade")
        assert STORE_TABLES <= set(sa.inspect(engine).get_table_names())
