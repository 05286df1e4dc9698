# tests/conftest.py

import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Добавляем корень backend в PYTHONPATH, чтобы импортировался пакет projecthub
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Отдельная sqlite-база и каталог вложений для тестов
TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="projecthub-tests-"))
os.environ.setdefault("DB_URL", f"sqlite:///{TEST_DATA_DIR / 'test.db'}")
os.environ.setdefault("UPLOAD_DIR", str(TEST_DATA_DIR / "attachments"))
os.environ.setdefault("ENVIRONMENT", "test")

from projecthub.core.rate_limit import limiter  # noqa: E402
from projecthub.db import Base, SessionLocal, engine  # noqa: E402
from projecthub.main import app  # noqa: E402
from projecthub.services.transactions import RetryPolicy  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    """
    Перед каждым тестом пересоздаём структуру БД,
    чтобы тесты не влияли друг на друга.
    Также сбрасываем rate limiter, чтобы лимиты не накапливались между тестами.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limiter.reset()
    yield


@pytest.fixture()
def client() -> TestClient:
    """
    Фикстура HTTP-клиента для тестирования FastAPI-приложения.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def instant_retry() -> RetryPolicy:
    """Retry policy without waiting between attempts."""
    return RetryPolicy(max_retries=3, initial_delay=0, max_delay=0, jitter=0)
