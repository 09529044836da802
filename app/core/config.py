"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- JWT 인증 관련 시크릿 및 만료 정책
- 부트스트랩 SUPERADMIN 계정 정보
- 활동 로그 / 방문자 기록 보관 개수
- CORS 허용 도메인 목록
- 로깅 레벨 / 출력 형식

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 설정 값은 런타임 중 변경되지 않는 불변 객체로 취급

관련 파일:
- app.main               : CORS / 로깅 초기화 시 설정 사용
- app.core.security      : JWT 시크릿 / 만료 / bcrypt rounds 사용
- app.db.session         : DATABASE_URL 사용
- app.services.*         : 보관 개수 / 기본 quota 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# .env 파일에 정의된 환경 변수를 로드하는 설정 클래스
# extra="ignore" 옵션으로 정의되지 않은 환경 변수는 무시
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # 테스트에서는 4로 낮춰서 해싱 시간을 줄인다
    BCRYPT_ROUNDS: int = 12

    # 부트스트랩 SUPERADMIN
    # - 저장소(store)를 거치지 않는 고정 계정
    # - SUPERADMIN_PASSWORD가 비어 있으면 부트스트랩 로그인 비활성화
    SUPERADMIN_USERNAME: str = "superadmin"
    SUPERADMIN_PASSWORD: str | None = None
    SUPERADMIN_EMAIL: str = "admin@tontines.local"
    SUPERADMIN_QUOTA: int = 999

    # 가입 승인 시 quota를 지정하지 않으면 사용하는 기본값
    DEFAULT_TONTINE_QUOTA: int = 3

    # 활동 로그 / 방문자 기록은 최근 N개만 보관
    ACTIVITY_LOG_RETENTION: int = 100
    VISITOR_RETENTION: int = 100

    # 전체 로그가 비어 있을 때 예시 로그 3건을 채워 넣을지 여부
    SEED_EXAMPLE_LOGS: bool = True

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
# 실행 시 한 번만 생성됨
settings = Settings()
