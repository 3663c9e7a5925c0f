from typing import Annotated

from pydantic import AfterValidator, AnyHttpUrl, StringConstraints, TypeAdapter, ValidationError
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


_http_url = TypeAdapter(AnyHttpUrl)


# URL 형식만 검증하고 원본 문자열은 그대로 저장 (정규화로 인한 값 변경 방지)
def _http_url_str(value: str) -> str:
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("must be an http(s) URL") from None
    return value


# email도 형식만 검증 (EmailStr은 도메인을 소문자로 바꿈)
def _email_str(value: str) -> str:
    try:
        validate_email(value)
    except PydanticCustomError:
        raise ValueError("value is not a valid email address") from None
    return value


# 부분 수정 스키마에서 NOT NULL 컬럼에 명시적 null 입력 차단
def reject_null(value):
    if value is None:
        raise ValueError("must not be null")
    return value


Name = Annotated[str, StringConstraints(max_length=120), AfterValidator(_not_blank)]
Address = Annotated[str, StringConstraints(max_length=255), AfterValidator(_not_blank)]
Region = Annotated[str, StringConstraints(max_length=80), AfterValidator(_not_blank)]
Phone = Annotated[str, StringConstraints(max_length=30, pattern=r"^[0-9+()\-. ]+$")]
ProfileUrl = Annotated[str, StringConstraints(max_length=2048), AfterValidator(_http_url_str)]
Email = Annotated[str, StringConstraints(max_length=255), AfterValidator(_email_str)]
