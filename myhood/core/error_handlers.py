"""
error_handlers.py

전역 예외 핸들러 등록 파일.

- HoodError              -> 예외에 정의된 상태 코드 + {"error": {...}} 응답
- RequestValidationError -> 400 + 필드별 오류 목록
- IntegrityError         -> 409 (서비스 사전 검증을 통과한 동시 요청이
                            DB 제약에 걸린 경우의 최종 방어선)

라우터는 이 예외들을 직접 잡지 않고 rollback 후 그대로 전파한다.

"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from myhood.core.errors import HoodError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HoodError)
    async def hood_error_handler(request: Request, exc: HoodError):
        logger.warning(
            "%s: %s", exc.code, exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = {}
        for err in exc.errors():
            # loc 예: ("body", "birthday")
            loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
            fields[".".join(loc) or "body"] = err.get("msg", "invalid")
        logger.warning("Request validation failed on %s: %s", request.url.path, fields)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": {"fields": fields},
                }
            },
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": {
                    "code": "CONFLICT",
                    "message": "Request conflicts with existing data",
                }
            },
        )
