# bookmarket/db.py
"""Database engine and session utilities.

`Database` owns the engine and session factory for the lifetime of the app.
It is built once by `create_app()`, kept on `app.state.db`, and disposed on
shutdown. Routes get a per-request session through `get_db`.
"""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class Database:
    def __init__(self, url: str, pool_size: int = 5, max_overflow: int = 10):
        if url.startswith("sqlite"):
            # one shared connection so in-memory databases survive across sessions
            self.engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            # tuned pool settings for cloud DB
            self.engine = create_engine(
                url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True
            )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        import bookmarket.models  # noqa: F401 ensure models are imported so tables are known
        Base.metadata.create_all(bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
