"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

이 파일은 SQLAlchemy Engine과 SessionLocal을 생성하여
애플리케이션 전반에서 공통으로 사용하는 DB 연결을 관리한다.

FastAPI 의존성(get_db)을 통해
요청 단위로 세션을 생성/종료하는 구조를 지원한다.

설계 원칙:
- DB 연결 설정은 한 곳에서만 정의
- 세션 생성/종료 책임을 명확히 분리
- pool_pre_ping=True로 유휴 연결 오류 방지
- 테이블 생성(init_db)은 프로세스 시작 시 한 번만 수행

관련 파일:
- app.core.config        : DATABASE_URL 설정
- app.core.deps          : get_db 의존성
- app.db.store           : 세션 위에서 동작하는 key/value 저장소

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.db.base import Base


# SQLite는 요청 스레드가 바뀌므로 check_same_thread를 꺼야 함
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# SQLAlchemy Engine 생성
# pool_pre_ping=True:
#   장시간 idle 후 끊어진 DB 커넥션을 자동으로 감지/재연결
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# 요청 단위로 사용할 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


"""
저장소 테이블 초기화

- 앱 시작(lifespan) 시 한 번 호출
- 이미 존재하는 테이블은 건드리지 않음 (운영 스키마 변경은 Alembic으로)

"""

def init_db(bind=None) -> None:
    # 모델 import 시 Base.metadata에 테이블 등록
    import app.models.kv_store  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
