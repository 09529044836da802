"""
base.py

SQLAlchemy ORM Base 정의 파일.

이 파일은 모든 SQLAlchemy 모델이 상속받는
공통 Base 클래스를 정의한다.

현재 ORM 테이블은 key/value 저장소(kv_store) 하나뿐이며,
톤틴 / 사용자 / 로그 등 도메인 레코드는 이 테이블 안에
컬렉션(JSON 배열) 단위로 저장된다.
Alembic 마이그레이션 또한 이 Base를 기준으로 동작한다.

관련 파일:
- app.models.kv_store     : key/value 저장소 테이블
- alembic/versions        : 마이그레이션

"""

from sqlalchemy.orm import declarative_base

# 모든 ORM 모델이 상속받는 Base 클래스
Base = declarative_base()
