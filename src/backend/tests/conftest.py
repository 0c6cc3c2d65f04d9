"""
Pytest 配置和通用 Fixtures

提供内存 SQLite 数据库、测试客户端与测试数据工厂
"""
import os
import sys
import uuid
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# 测试使用内存数据库，不在启动时建表
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["AUTO_INIT_DB"] = "false"

from radcase.core.database import get_db
from radcase.models import Base, Case, User, UserCaseProgress


# ==================== 数据库 ====================

@pytest.fixture
def db_engine():
    """每个测试独立的内存数据库"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """数据库会话"""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """创建测试客户端（替换 get_db 依赖）"""
    from fastapi.testclient import TestClient
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ==================== 测试数据 ====================

@pytest.fixture
def make_user(db_session):
    """学员工厂"""
    def _make(username: str = None) -> User:
        user = User(
            id=str(uuid.uuid4()),
            username=username or f"resident_{uuid.uuid4().hex[:8]}",
            display_name="Test Resident",
            role="resident",
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_case(db_session):
    """病例工厂"""
    def _make(title: str = "Saddle Pulmonary Embolism", **fields) -> Case:
        case = Case(
            id=fields.pop("id", None) or str(uuid.uuid4()),
            title=title,
            modality=fields.pop("modality", "CT"),
            body_part=fields.pop("body_part", "Chest"),
            difficulty=fields.pop("difficulty", 2),
            **fields
        )
        db_session.add(case)
        db_session.commit()
        return case
    return _make


@pytest.fixture
def make_progress(db_session):
    """复习进度工厂"""
    def _make(
        user: User,
        case: Case,
        next_review: date,
        ease_factor: float = 2.5,
        interval_days: int = 1,
        repetitions: int = 1
    ) -> UserCaseProgress:
        progress = UserCaseProgress(
            user_id=user.id,
            case_id=case.id,
            ease_factor=ease_factor,
            interval_days=interval_days,
            repetitions=repetitions,
            next_review=next_review,
            last_reviewed=datetime(2024, 1, 1, 8, 0, 0),
        )
        db_session.add(progress)
        db_session.commit()
        return progress
    return _make
