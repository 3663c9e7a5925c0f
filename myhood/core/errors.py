"""
errors.py

도메인 예외(Exception) 계층 정의 파일.

서비스 계층은 HTTP를 모르는 상태에서 이 예외들만 발생시키고,
myhood.core.error_handlers 에 등록된 전역 핸들러가
이를 HTTP 상태 코드와 JSON 에러 응답으로 변환한다.

예외 분류:
- ValidationError : 필수 필드 누락 / 형식 오류 (400)
- NotFoundError   : 참조한 id가 존재하지 않음 (404)
- ConflictError   : 유일성(unique) 위반, 참조 중인 엔티티 삭제 시도 (409)
- OverlapError    : 재무 담당(treasurer) 임기 기간 충돌 (409)

설계 원칙:
- 모든 도메인 예외는 HoodError를 상속
- 호출자가 잘못된 입력을 준 경우이므로 자동 재시도하지 않음

"""

from typing import Any


class HoodError(Exception):
    code = "HOOD_ERROR"
    http_status = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class ValidationError(HoodError):
    """
    필드 검증 실패.

    fields: 문제가 된 필드 이름 -> 사유 매핑
    """

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, message: str, *, fields: dict[str, str] | None = None):
        self.fields = fields or {}
        super().__init__(message, details={"fields": self.fields} if self.fields else None)


class NotFoundError(HoodError):
    code = "NOT_FOUND"
    http_status = 404


class ConflictError(HoodError):
    code = "CONFLICT"
    http_status = 409


class OverlapError(ConflictError):
    code = "OVERLAP"
