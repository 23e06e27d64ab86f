import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Point the app at throwaway SQLite databases before it is imported, so the
# startup connection check never reaches a real server.
os.environ.setdefault("PRIMARY_DATABASE_URL", "sqlite://")
os.environ.setdefault("TRACKING_DATABASE_URL", "sqlite://")

from sql_playground.config import settings  # noqa: E402
from sql_playground.database import Base, get_primary_db, get_tracking_db  # noqa: E402
from sql_playground.main import app  # noqa: E402

PRIMARY_SCHEMA = settings.primary_schema
TRACKING_SCHEMA = settings.tracking_schema

# A miniature information_schema. SQLite has no catalog views, so the tables
# the introspection queries read are attached as a database of that name.
CATALOG_DDL = [
    """
    CREATE TABLE information_schema.tables (
        table_schema TEXT, table_name TEXT, table_type TEXT
    )
    """,
    """
    CREATE TABLE information_schema.columns (
        table_schema TEXT, table_name TEXT, column_name TEXT,
        ordinal_position INTEGER, data_type TEXT, is_nullable TEXT,
        column_default TEXT
    )
    """,
    """
    CREATE TABLE information_schema.table_constraints (
        constraint_name TEXT, table_schema TEXT, table_name TEXT,
        constraint_type TEXT
    )
    """,
    """
    CREATE TABLE information_schema.key_column_usage (
        constraint_name TEXT, table_schema TEXT, table_name TEXT,
        column_name TEXT, ordinal_position INTEGER
    )
    """,
]

WAREHOUSE_DDL = [
    f"""
    CREATE TABLE {PRIMARY_SCHEMA}.customers (
        id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT, city TEXT
    )
    """,
    f"""
    CREATE TABLE {PRIMARY_SCHEMA}.order_items (
        order_id INTEGER, line_no INTEGER, sku TEXT, quantity INTEGER,
        PRIMARY KEY (order_id, line_no)
    )
    """,
]

CUSTOMERS = [
    (1, "Ada Lovelace", "ada@example.com", "London"),
    (2, "Grace Hopper", "grace@example.com", "New York"),
    (3, "Alan Turing", None, "Manchester"),
]

# Rows are inserted out of ordinal order on purpose.
CATALOG_COLUMNS = [
    (PRIMARY_SCHEMA, "customers", "email", 3, "character varying", "YES", None),
    (PRIMARY_SCHEMA, "customers", "id", 1, "integer", "NO", "nextval('dbo.customers_id_seq'::regclass)"),
    (PRIMARY_SCHEMA, "customers", "city", 4, "text", "YES", "'Unknown'::text"),
    (PRIMARY_SCHEMA, "customers", "name", 2, "character varying", "NO", None),
    (PRIMARY_SCHEMA, "order_items", "quantity", 4, "integer", "NO", "1"),
    (PRIMARY_SCHEMA, "order_items", "sku", 3, "text", "NO", None),
    (PRIMARY_SCHEMA, "order_items", "line_no", 2, "integer", "NO", None),
    (PRIMARY_SCHEMA, "order_items", "order_id", 1, "integer", "NO", None),
    # Same table name in another schema, with a different key.
    ("public", "customers", "customer_code", 1, "text", "NO", None),
    ("public", "customers", "id", 2, "integer", "NO", None),
]

CATALOG_CONSTRAINTS = [
    ("customers_pkey", PRIMARY_SCHEMA, "customers", "PRIMARY KEY"),
    ("customers_email_key", PRIMARY_SCHEMA, "customers", "UNIQUE"),
    ("order_items_pkey", PRIMARY_SCHEMA, "order_items", "PRIMARY KEY"),
    ("public_customers_pkey", "public", "customers", "PRIMARY KEY"),
]

CATALOG_KEY_USAGE = [
    ("customers_pkey", PRIMARY_SCHEMA, "customers", "id", 1),
    ("customers_email_key", PRIMARY_SCHEMA, "customers", "email", 1),
    ("order_items_pkey", PRIMARY_SCHEMA, "order_items", "order_id", 1),
    ("order_items_pkey", PRIMARY_SCHEMA, "order_items", "line_no", 2),
    ("public_customers_pkey", "public", "customers", "customer_code", 1),
]

CATALOG_TABLES = [
    (PRIMARY_SCHEMA, "order_items", "BASE TABLE"),
    (PRIMARY_SCHEMA, "customers", "BASE TABLE"),
    ("public", "audit_log", "BASE TABLE"),
]


def _sqlite_engine(*schemas: str):
    """In-memory SQLite shared across connections, with ``schemas`` attached."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _attach(dbapi_connection, connection_record):
        for schema in schemas:
            dbapi_connection.execute(f"ATTACH DATABASE ':memory:' AS {schema}")

    return engine


@pytest.fixture()
def primary_engine():
    """Warehouse with two tables and matching catalog metadata."""
    engine = _sqlite_engine("information_schema", PRIMARY_SCHEMA)
    with engine.begin() as conn:
        for ddl in CATALOG_DDL + WAREHOUSE_DDL:
            conn.exec_driver_sql(ddl)
        conn.exec_driver_sql(
            f"INSERT INTO {PRIMARY_SCHEMA}.customers VALUES (?, ?, ?, ?)", CUSTOMERS
        )
        conn.exec_driver_sql(
            "INSERT INTO information_schema.tables VALUES (?, ?, ?)", CATALOG_TABLES
        )
        conn.exec_driver_sql(
            "INSERT INTO information_schema.columns VALUES (?, ?, ?, ?, ?, ?, ?)",
            CATALOG_COLUMNS,
        )
        conn.exec_driver_sql(
            "INSERT INTO information_schema.table_constraints VALUES (?, ?, ?, ?)",
            CATALOG_CONSTRAINTS,
        )
        conn.exec_driver_sql(
            "INSERT INTO information_schema.key_column_usage VALUES (?, ?, ?, ?, ?)",
            CATALOG_KEY_USAGE,
        )
    yield engine
    engine.dispose()


@pytest.fixture()
def tracking_engine():
    """User/activity store with a fresh schema for each test."""
    engine = _sqlite_engine(TRACKING_SCHEMA)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def primary_session(primary_engine):
    db = sessionmaker(autocommit=False, autoflush=False, bind=primary_engine)()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def tracking_session(tracking_engine):
    db = sessionmaker(autocommit=False, autoflush=False, bind=tracking_engine)()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(primary_engine, tracking_engine):
    """TestClient whose session dependencies hand out sessions on the SQLite engines."""
    PrimarySession = sessionmaker(autocommit=False, autoflush=False, bind=primary_engine)
    TrackingSession = sessionmaker(autocommit=False, autoflush=False, bind=tracking_engine)

    def override_get_primary_db():
        db = PrimarySession()
        try:
            yield db
        finally:
            db.close()

    def override_get_tracking_db():
        db = TrackingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_primary_db] = override_get_primary_db
    app.dependency_overrides[get_tracking_db] = override_get_tracking_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def user_factory(tracking_session):
    """Insert users straight into the store, bypassing the API."""
    from sql_playground.models import User

    def _create_user(email: str, password: str, full_name: str = "Test User") -> User:
        user = User(login_id=email, email=email, password_hash=password, full_name=full_name)
        tracking_session.add(user)
        tracking_session.commit()
        tracking_session.refresh(user)
        return user

    return _create_user
