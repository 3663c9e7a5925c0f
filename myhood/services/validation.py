"""
services/validation.py

Pydantic 스키마 검증 결과를 도메인 ValidationError로 변환하는 공통 함수.

라우터를 거치지 않는 호출(스크립트, 다른 서비스)에서도
동일한 검증 규칙과 동일한 에러 형식을 사용하기 위함이다.

"""

from typing import Any, Mapping, Type, TypeVar

import pydantic

from myhood.core.errors import ValidationError

M = TypeVar("M", bound=pydantic.BaseModel)


def validate_payload(model: Type[M], candidate: Mapping[str, Any], *, label: str) -> M:
    try:
        return model.model_validate(dict(candidate))
    except pydantic.ValidationError as e:
        fields: dict[str, str] = {}
        for err in e.errors():
            key = ".".join(str(p) for p in err.get("loc", ())) or "__root__"
            # 같은 필드에 여러 오류가 있으면 첫 번째만 보고
            fields.setdefault(key, "missing" if err.get("type") == "missing" else err.get("msg", "invalid"))
        raise ValidationError(
            f"invalid {label}: " + ", ".join(sorted(fields)),
            fields=fields,
        ) from None
