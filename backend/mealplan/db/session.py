from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from mealplan.config import DATABASE_URL, SQL_ECHO


def configure_sqlite(engine: Engine) -> Engine:
    """Enforce foreign keys and let SQLAlchemy own BEGIN/SAVEPOINT on pysqlite.

    pysqlite defers BEGIN until the first DML statement, which breaks
    savepoints; disabling its transaction handling and emitting BEGIN from
    the engine's ``begin`` event restores proper nesting.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def make_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        return configure_sqlite(create_engine(url, echo=SQL_ECHO, **kwargs))
    return create_engine(url, echo=SQL_ECHO, pool_pre_ping=True, **kwargs)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
