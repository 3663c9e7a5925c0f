"""

회원 / 협회 입력 검증 테스트.
- 올바른 입력은 모든 필드가 그대로 유지되는지 (round-trip)
- 필수 필드 누락 / 형식 오류 시 문제 필드가 ValidationError.fields 에 담기는지 확인한다.

"""

import uuid
from datetime import date

import pytest

from myhood.core.errors import ValidationError
from myhood.services.associations import validate_association
from myhood.services.users import validate_user

from tests.helpers import association_payload, user_payload


def test_validate_user_round_trips_every_field():
    candidate = {
        "id": str(uuid.uuid4()),
        "name": "João Souza",
        "birthday": "2012-11-19",
        "address": "Rua A nr 1",
        "activity": "Padeiro",
        "email": "joao@example.com",
        "personal_phone": "+55 11 99999-0000",
        "commercial_phone": "(11) 3333-4444",
        "uses_whatsapp": False,
        "identities": "RG 12.345.678-9,CPF 123.456.789-00",
        "profile_url": "https://example.com/joao",
    }

    user = validate_user(candidate)
    dumped = user.model_dump()

    assert dumped["id"] == uuid.UUID(candidate["id"])
    assert dumped["birthday"] == date(2012, 11, 19)
    for key in (
        "name", "address", "activity", "email", "personal_phone",
        "commercial_phone", "uses_whatsapp", "identities", "profile_url",
    ):
        assert dumped[key] == candidate[key], key


def test_validate_user_optional_fields_default_to_none():
    user = validate_user({
        "name": "Ana",
        "birthday": "1985-01-02",
        "address": "Rua B",
        "uses_whatsapp": True,
    })
    assert user.id is None
    assert user.email is None
    assert user.profile_url is None


def test_validate_user_lists_every_missing_required_field():
    with pytest.raises(ValidationError) as exc:
        validate_user({"activity": "Costureira"})

    assert set(exc.value.fields) == {"name", "birthday", "address", "uses_whatsapp"}
    assert all(reason == "missing" for reason in exc.value.fields.values())


@pytest.mark.parametrize(
    "field,value",
    [
        ("uses_whatsapp", "yes"),
        ("uses_whatsapp", 1),
        ("email", "not-an-email"),
        ("birthday", "19/11/2012"),
        ("id", "U1"),
        ("name", "   "),
        ("profile_url", "ftp//broken"),
    ],
)
def test_validate_user_rejects_malformed_field(field, value):
    with pytest.raises(ValidationError) as exc:
        validate_user(user_payload(**{field: value}))
    assert list(exc.value.fields) == [field]


def test_validate_association_round_trips_every_field():
    candidate = association_payload(id=str(uuid.uuid4()), identity="CNPJ 00.000.000/0001-00")

    association = validate_association(candidate).model_dump()

    assert association["id"] == uuid.UUID(candidate["id"])
    for key in ("name", "neighborhood", "country", "state", "address", "identity"):
        assert association[key] == candidate[key], key


def test_validate_association_lists_missing_fields():
    with pytest.raises(ValidationError) as exc:
        validate_association({"name": "Sem endereço"})

    assert set(exc.value.fields) == {"neighborhood", "country", "state", "address"}
    assert exc.value.to_response()["error"]["code"] == "VALIDATION_ERROR"


def test_email_is_kept_exactly_as_sent():
    user = validate_user(user_payload(email="Joao.Souza@Example.COM"))
    assert user.email == "Joao.Souza@Example.COM"

    with pytest.raises(ValidationError) as exc:
        validate_user(user_payload(email="joao@"))
    assert "email" in exc.value.fields
