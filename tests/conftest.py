"""
Test configuration

Settings are read once per process, so the environment is prepared before
anything from sensai is imported.
"""
import os

os.environ["LOG_TO_FILE"] = "false"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["AI_INITIAL_DELAY_SECONDS"] = "0"
os.environ["AI_MAX_JITTER_SECONDS"] = "0"
os.environ["AI_QUIZ_MAX_JITTER_SECONDS"] = "0"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

import sensai.models  # noqa: F401  (registers tables)
from sensai.models.base import Base, configure_sqlite


@pytest.fixture
def session_factory(tmp_path):
    """Sessions bound to a fresh file-backed SQLite database."""
    engine = configure_sqlite(create_engine(
        f"sqlite:///{tmp_path / 'sensai_test.db'}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    ))
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
