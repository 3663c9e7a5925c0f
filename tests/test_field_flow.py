"""

장소 / 예약 API 통합 테스트.
- 장소 등록은 협회 관리자 전용, 규칙은 JSON 문자열로도 전달 가능
- 회원 예약 -> 1일 1회 제한 409 -> 취소 -> 재예약
- 비회원 예약 403, 다른 회원의 예약 취소 403 (관리자는 가능)
- 기간별 예약 조회, 조회 기간 제한 400

"""

import json
from datetime import datetime, timezone

import pytest

from myhood.core.deps import get_now
from myhood.main import app as fastapi_app
from myhood.services import relations as rel

from tests.helpers import DAILY_RULES, auth_header, field_payload, make_association, make_user, token_for


@pytest.fixture()
def fixed_now(client):
    fastapi_app.dependency_overrides[get_now] = lambda: datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)
    yield
    fastapi_app.dependency_overrides.pop(get_now, None)


def _setup(db):
    founder = make_user(db)
    association = make_association(db, founder=founder)
    member = make_user(db)
    rel.link_user_to_association(db, user_id=member.id, association_id=association.id)
    db.commit()
    return association, founder, member


def _reserve(client, field_id, token, start, end):
    return client.post(
        f"/fields/{field_id}/reservations",
        headers=auth_header(token),
        json={"start_at": start, "end_at": end, "description": "Beach tennis"},
    )


def test_field_registration_is_admin_only(client, db):
    association, founder, member = _setup(db)

    r = client.post(
        f"/associations/{association.id}/fields",
        headers=auth_header(token_for(member)),
        json=field_payload(),
    )
    assert r.status_code == 403, r.text

    r = client.post(
        f"/associations/{association.id}/fields",
        headers=auth_header(token_for(founder)),
        json=field_payload(reservation_rules=json.dumps(DAILY_RULES)),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["reservation_rules"]["max_duration_minutes"] == 60
    assert body["deleted"] is False

    bad = client.post(
        f"/associations/{association.id}/fields",
        headers=auth_header(token_for(founder)),
        json=field_payload(latitude="95"),
    )
    assert bad.status_code == 400, bad.text
    assert "latitude" in bad.json()["error"]["details"]["fields"]

    listed = client.get(f"/associations/{association.id}/fields", headers=auth_header(token_for(member)))
    assert listed.status_code == 200, listed.text
    assert [f["id"] for f in listed.json()] == [body["id"]]

    patched = client.patch(
        f"/fields/{body['id']}",
        headers=auth_header(token_for(founder)),
        json={"reservation_rules": None, "name": "Quadra 1"},
    )
    assert patched.status_code == 200, patched.text
    assert patched.json()["reservation_rules"] is None
    assert patched.json()["name"] == "Quadra 1"

    r = client.patch(f"/fields/{body['id']}", headers=auth_header(token_for(founder)), json={"latitude": None})
    assert r.status_code == 400, r.text


def test_reservation_flow(client, db, fixed_now):
    association, founder, member = _setup(db)
    field = client.post(
        f"/associations/{association.id}/fields",
        headers=auth_header(token_for(founder)),
        json=field_payload(),
    ).json()
    token = token_for(member)

    first = _reserve(client, field["id"], token, "2024-01-01T10:00:00Z", "2024-01-01T11:00:00Z")
    assert first.status_code == 201, first.text
    assert first.json()["user_id"] == str(member.id)

    # 1일 1회 제한
    second = _reserve(client, field["id"], token, "2024-01-01T11:00:00Z", "2024-01-01T12:00:00Z")
    assert second.status_code == 409, second.text
    assert second.json()["error"]["code"] == "CONFLICT"

    # 내일 예약 / 최대 길이 초과
    tomorrow = _reserve(client, field["id"], token, "2024-01-02T10:00:00Z", "2024-01-02T11:00:00Z")
    assert tomorrow.status_code == 400, tomorrow.text
    too_long = _reserve(client, field["id"], token, "2024-01-01T12:00:00Z", "2024-01-01T14:00:00Z")
    assert too_long.status_code == 400, too_long.text

    # 다른 회원이 같은 시간 예약 -> 겹침
    overlap = _reserve(client, field["id"], token_for(founder), "2024-01-01T10:30:00Z", "2024-01-01T11:00:00Z")
    assert overlap.status_code == 409, overlap.text
    assert overlap.json()["error"]["code"] == "OVERLAP"

    cancelled = client.delete(f"/reservations/{first.json()['id']}", headers=auth_header(token))
    assert cancelled.status_code == 200, cancelled.text
    assert cancelled.json()["deleted"] is True

    again = _reserve(client, field["id"], token, "2024-01-01T11:00:00Z", "2024-01-01T12:00:00Z")
    assert again.status_code == 201, again.text

    listed = client.get(
        f"/fields/{field['id']}/reservations",
        headers=auth_header(token),
        params={"start": "2024-01-01T00:00:00Z", "end": "2024-01-02T00:00:00Z"},
    )
    assert listed.status_code == 200, listed.text
    assert [r["id"] for r in listed.json()] == [again.json()["id"]]

    too_wide = client.get(
        f"/fields/{field['id']}/reservations",
        headers=auth_header(token),
        params={"start": "2024-01-01T00:00:00Z", "end": "2024-03-01T00:00:00Z"},
    )
    assert too_wide.status_code == 400, too_wide.text


def test_only_members_reserve_and_only_owner_or_admin_cancels(client, db, fixed_now):
    association, founder, member = _setup(db)
    other = make_user(db)
    rel.link_user_to_association(db, user_id=other.id, association_id=association.id)
    db.commit()
    outsider = make_user(db)

    field = client.post(
        f"/associations/{association.id}/fields",
        headers=auth_header(token_for(founder)),
        json=field_payload(reservation_rules=None),
    ).json()

    r = _reserve(client, field["id"], token_for(outsider), "2024-01-01T10:00:00Z", "2024-01-01T11:00:00Z")
    assert r.status_code == 403, r.text

    mine = _reserve(client, field["id"], token_for(member), "2024-01-01T10:00:00Z", "2024-01-01T11:00:00Z")
    assert mine.status_code == 201, mine.text
    rid = mine.json()["id"]

    r = client.delete(f"/reservations/{rid}", headers=auth_header(token_for(other)))
    assert r.status_code == 403, r.text

    r = client.delete(f"/reservations/{rid}", headers=auth_header(token_for(founder)))
    assert r.status_code == 200, r.text
    assert r.json()["deleted"] is True

    r = client.delete("/reservations/5f0c6a1e-1111-4c2b-9a51-3e0d7c1f0000", headers=auth_header(token_for(founder)))
    assert r.status_code == 404, r.text


def test_deleted_field_cannot_be_reserved(client, db, fixed_now):
    association, founder, member = _setup(db)
    field = client.post(
        f"/associations/{association.id}/fields",
        headers=auth_header(token_for(founder)),
        json=field_payload(reservation_rules=None),
    ).json()

    for _ in range(2):
        d = client.delete(f"/fields/{field['id']}", headers=auth_header(token_for(founder)))
        assert d.status_code == 200, d.text
        assert d.json()["deleted"] is True

    r = _reserve(client, field["id"], token_for(member), "2024-01-01T10:00:00Z", "2024-01-01T11:00:00Z")
    assert r.status_code == 404, r.text
