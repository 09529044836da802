"""
errors.py

서비스 계층 예외 정의 파일.

서비스 함수는 HTTP를 모르는 상태로 아래 예외를 발생시키고,
라우터는 status_code를 그대로 사용해 HTTPException으로 변환한다.

- NotFoundError            : 톤틴 / 참가자 / 가입 요청 / 사용자 없음 (404)
- ForbiddenError           : 다른 사용자 소유의 톤틴 접근 (403)
- QuotaExceededError       : 톤틴 생성 한도 초과 (409)
- CapacityExceededError    : 참가자 정원 초과 (409)
- ValidationConflictError  : username / email 중복 (400)
- InvalidRequestError      : 그 외 입력 / 상태 검증 실패 (400)

"""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class QuotaExceededError(ServiceError):
    status_code = 409


class CapacityExceededError(ServiceError):
    status_code = 409


class ValidationConflictError(ServiceError):
    status_code = 400


class InvalidRequestError(ServiceError):
    status_code = 400
