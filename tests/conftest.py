import os

# 앱 import 전에 테스트용 환경 변수 설정 (Settings는 import 시 한 번 생성됨)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SUPERADMIN_USERNAME"] = "superadmin"
os.environ["SUPERADMIN_PASSWORD"] = "SuperPassw0rd!"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_JSON"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app as fastapi_app
from app.core.deps import get_db
from app.db.session import init_db
from app.db.store import Store


@pytest.fixture()
def engine():
    """테스트마다 새 in-memory SQLite (StaticPool로 모든 세션이 같은 연결 공유)"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    """서비스 테스트에서 직접 쓰는 세션"""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db_session):
    return Store(db_session)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
