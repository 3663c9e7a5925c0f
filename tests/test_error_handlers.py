"""

전역 예외 핸들러 테스트.
- 도메인 예외 -> 정의된 상태 코드 + {"error": {...}}
- DB 제약 위반(IntegrityError) -> 409 CONFLICT

"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from myhood.core.error_handlers import register_error_handlers
from myhood.core.errors import NotFoundError


@pytest.fixture()
def handler_client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/duplicate")
    def duplicate():
        raise IntegrityError(
            "INSERT INTO association_treasurers ...",
            {},
            Exception("UNIQUE constraint failed: association_treasurers.association_id"),
        )

    @app.get("/missing")
    def missing():
        raise NotFoundError("association not found")

    return TestClient(app)


def test_integrity_error_becomes_conflict(handler_client):
    r = handler_client.get("/duplicate")
    assert r.status_code == 409, r.text
    assert r.json()["error"]["code"] == "CONFLICT"
    # 드라이버 메시지는 응답에 노출하지 않음
    assert "UNIQUE" not in r.text


def test_domain_error_keeps_its_status(handler_client):
    r = handler_client.get("/missing")
    assert r.status_code == 404, r.text
    assert r.json() == {"error": {"code": "NOT_FOUND", "message": "association not found"}}
