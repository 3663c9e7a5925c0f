"""

회원 가입 / 관리자 / 재무 담당 관계 서비스 테스트.
- 중복 가입 방지(ConflictError), 존재하지 않는 id(NotFoundError)
- 관리자는 회원이어야 하며 마지막 관리자는 해제 불가
- 재무 담당 임기 겹침 방지(OverlapError), 임기 종료, 현재 재무 담당 판단
- 회원 / 협회 삭제 시 관계 CASCADE 삭제

"""

import uuid
from itertools import combinations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from myhood.core.errors import ConflictError, NotFoundError, OverlapError, ValidationError
from myhood.models.relations import AssociationAdmin, AssociationTreasurer, UserAssociation
from myhood.services import relations as rel
from myhood.services.associations import delete_association
from myhood.services.users import delete_user

from tests.helpers import D, make_association, make_user


def _count(db, model, **filters):
    stmt = select(func.count()).select_from(model)
    for key, value in filters.items():
        stmt = stmt.where(getattr(model, key) == value)
    return db.scalar(stmt)


# ---- 회원 가입 링크 ----

def test_link_twice_keeps_single_row_and_raises_conflict(db):
    user = make_user(db)
    association = make_association(db)

    rel.link_user_to_association(db, user_id=user.id, association_id=association.id)
    with pytest.raises(ConflictError):
        rel.link_user_to_association(db, user_id=user.id, association_id=association.id)

    assert _count(db, UserAssociation, user_id=user.id, association_id=association.id) == 1


def test_link_requires_existing_endpoints(db):
    user = make_user(db)
    association = make_association(db)

    with pytest.raises(NotFoundError):
        rel.link_user_to_association(db, user_id=uuid.uuid4(), association_id=association.id)
    with pytest.raises(NotFoundError):
        rel.link_user_to_association(db, user_id=user.id, association_id=uuid.uuid4())


def test_unlink_removes_admin_and_treasurer_rows(db):
    founder = make_user(db)
    member = make_user(db)
    association = make_association(db, founder=founder)

    rel.link_user_to_association(db, user_id=member.id, association_id=association.id)
    rel.assign_admin(db, user_id=member.id, association_id=association.id)
    rel.assign_treasurer(db, user_id=member.id, association_id=association.id, start_date=D("2024-01-01"))

    rel.unlink_user_from_association(db, user_id=member.id, association_id=association.id)

    assert not rel.is_member(db, user_id=member.id, association_id=association.id)
    assert not rel.is_admin(db, user_id=member.id, association_id=association.id)
    assert _count(db, AssociationTreasurer, user_id=member.id) == 0


def test_unlink_unknown_membership_is_not_found(db):
    user = make_user(db)
    association = make_association(db)

    with pytest.raises(NotFoundError):
        rel.unlink_user_from_association(db, user_id=user.id, association_id=association.id)


# ---- 관리자 ----

def test_admin_requires_membership(db):
    user = make_user(db)
    association = make_association(db)

    with pytest.raises(ValidationError) as exc:
        rel.assign_admin(db, user_id=user.id, association_id=association.id)
    assert "user_id" in exc.value.fields


def test_admin_assignment_is_unique(db):
    founder = make_user(db)
    association = make_association(db, founder=founder)

    with pytest.raises(ConflictError):
        rel.assign_admin(db, user_id=founder.id, association_id=association.id)


def test_last_admin_cannot_be_revoked_or_unlinked(db):
    founder = make_user(db)
    association = make_association(db, founder=founder)

    with pytest.raises(ConflictError):
        rel.revoke_admin(db, user_id=founder.id, association_id=association.id)
    with pytest.raises(ConflictError):
        rel.unlink_user_from_association(db, user_id=founder.id, association_id=association.id)

    other = make_user(db)
    rel.link_user_to_association(db, user_id=other.id, association_id=association.id)
    rel.assign_admin(db, user_id=other.id, association_id=association.id)
    rel.revoke_admin(db, user_id=founder.id, association_id=association.id)

    assert [a.user_id for a in rel.list_admins(db, association.id)] == [other.id]


# ---- 재무 담당 ----

def _members(db, association, n):
    users = [make_user(db) for _ in range(n)]
    for u in users:
        rel.link_user_to_association(db, user_id=u.id, association_id=association.id)
    return users


def test_second_open_term_overlaps_first(db):
    association = make_association(db)
    u1, u2 = _members(db, association, 2)

    rel.assign_treasurer(db, user_id=u1.id, association_id=association.id, start_date=D("2024-01-01"))
    with pytest.raises(OverlapError):
        rel.assign_treasurer(db, user_id=u2.id, association_id=association.id, start_date=D("2024-02-01"))


def test_adjacent_closed_terms_do_not_overlap(db):
    association = make_association(db)
    u1, u2 = _members(db, association, 2)

    rel.assign_treasurer(
        db, user_id=u1.id, association_id=association.id,
        start_date=D("2024-01-01"), end_date=D("2024-07-01"),
    )
    term = rel.assign_treasurer(db, user_id=u2.id, association_id=association.id, start_date=D("2024-07-01"))

    assert term.is_open
    assert len(rel.list_treasurer_terms(db, association.id)) == 2


@pytest.mark.parametrize(
    "start,end",
    [
        ("2023-12-01", "2024-02-01"),  # 시작 경계 걸침
        ("2024-03-01", "2024-04-01"),  # 내부 포함
        ("2024-05-31", None),          # 열린 임기가 기존 임기 끝과 걸침
        ("2023-01-01", None),          # 기존 임기 전체를 덮음
    ],
)
def test_overlapping_terms_are_rejected(db, start, end):
    association = make_association(db)
    u1, u2 = _members(db, association, 2)
    rel.assign_treasurer(
        db, user_id=u1.id, association_id=association.id,
        start_date=D("2024-01-01"), end_date=D("2024-06-01"),
    )

    with pytest.raises(OverlapError) as exc:
        rel.assign_treasurer(
            db, user_id=u2.id, association_id=association.id,
            start_date=D(start), end_date=D(end) if end else None,
        )
    assert exc.value.details["start_date"] == "2024-01-01"


def test_stored_terms_never_overlap(db):
    association = make_association(db)
    users = _members(db, association, 3)
    attempts = [
        ("2024-01-01", "2024-03-01"),
        ("2024-02-01", "2024-04-01"),
        ("2024-03-01", "2024-05-01"),
        ("2024-04-15", None),
        ("2024-05-01", None),
        ("2025-01-01", None),
    ]
    for i, (start, end) in enumerate(attempts):
        try:
            rel.assign_treasurer(
                db, user_id=users[i % 3].id, association_id=association.id,
                start_date=D(start), end_date=D(end) if end else None,
            )
        except OverlapError:
            pass

    terms = rel.list_treasurer_terms(db, association.id)
    assert len(terms) == 3
    for a, b in combinations(terms, 2):
        assert not rel.ranges_overlap(a.start_date, a.end_date, b.start_date, b.end_date)
    assert sum(1 for t in terms if t.is_open) == 1


def test_treasurer_term_validation(db):
    association = make_association(db)
    outsider = make_user(db)
    (member,) = _members(db, association, 1)

    with pytest.raises(ValidationError):
        rel.assign_treasurer(
            db, user_id=member.id, association_id=association.id,
            start_date=D("2024-02-01"), end_date=D("2024-01-01"),
        )
    with pytest.raises(ValidationError):
        rel.assign_treasurer(db, user_id=outsider.id, association_id=association.id, start_date=D("2024-01-01"))
    with pytest.raises(NotFoundError):
        rel.assign_treasurer(db, user_id=member.id, association_id=uuid.uuid4(), start_date=D("2024-01-01"))


def test_close_term_then_assign_successor(db):
    association = make_association(db)
    u1, u2 = _members(db, association, 2)
    rel.assign_treasurer(db, user_id=u1.id, association_id=association.id, start_date=D("2024-01-01"))

    closed = rel.close_treasurer_term(db, association_id=association.id, end_date=D("2024-06-30"))
    assert not closed.is_open
    assert rel.get_open_term(db, association.id) is None

    with pytest.raises(NotFoundError):
        rel.close_treasurer_term(db, association_id=association.id, end_date=D("2024-07-31"))

    rel.assign_treasurer(db, user_id=u2.id, association_id=association.id, start_date=D("2024-06-30"))

    assert rel.is_treasurer(db, user_id=u1.id, association_id=association.id, on=D("2024-06-29"))
    assert not rel.is_treasurer(db, user_id=u1.id, association_id=association.id, on=D("2024-06-30"))
    assert rel.is_treasurer(db, user_id=u2.id, association_id=association.id, on=D("2030-01-01"))


def test_close_term_before_start_is_rejected(db):
    association = make_association(db)
    (u1,) = _members(db, association, 1)
    rel.assign_treasurer(db, user_id=u1.id, association_id=association.id, start_date=D("2024-03-01"))

    with pytest.raises(ValidationError):
        rel.close_treasurer_term(db, association_id=association.id, end_date=D("2024-02-01"))
    assert rel.get_open_term(db, association.id) is not None


# ---- CASCADE ----

def test_deleting_user_cascades_links(db):
    founder = make_user(db)
    member = make_user(db)
    association = make_association(db, founder=founder)
    rel.link_user_to_association(db, user_id=member.id, association_id=association.id)
    rel.assign_admin(db, user_id=member.id, association_id=association.id)
    rel.assign_treasurer(db, user_id=member.id, association_id=association.id, start_date=D("2024-01-01"))
    db.commit()

    delete_user(db, user_id=member.id)
    db.commit()

    assert _count(db, UserAssociation, user_id=member.id) == 0
    assert _count(db, AssociationAdmin, user_id=member.id) == 0
    assert _count(db, AssociationTreasurer, user_id=member.id) == 0
    assert rel.is_member(db, user_id=founder.id, association_id=association.id)


def test_deleting_association_cascades_links(db):
    founder = make_user(db)
    association = make_association(db, founder=founder)
    rel.assign_treasurer(db, user_id=founder.id, association_id=association.id, start_date=D("2024-01-01"))
    db.commit()

    delete_association(db, association_id=association.id)
    db.commit()

    assert _count(db, UserAssociation, association_id=association.id) == 0
    assert _count(db, AssociationAdmin, association_id=association.id) == 0
    assert _count(db, AssociationTreasurer, association_id=association.id) == 0


def test_last_admin_user_cannot_be_deleted(db):
    founder = make_user(db)
    association = make_association(db, founder=founder)

    with pytest.raises(ConflictError) as exc:
        delete_user(db, user_id=founder.id)
    assert exc.value.details["association_id"] == str(association.id)
    db.rollback()

    successor = make_user(db)
    rel.link_user_to_association(db, user_id=successor.id, association_id=association.id)
    rel.assign_admin(db, user_id=successor.id, association_id=association.id)
    db.commit()

    delete_user(db, user_id=founder.id)
    db.commit()
    assert [a.user_id for a in rel.list_admins(db, association.id)] == [successor.id]


def test_database_rejects_second_open_term(db):
    association = make_association(db)
    u1, u2 = _members(db, association, 2)
    rel.assign_treasurer(db, user_id=u1.id, association_id=association.id, start_date=D("2024-01-01"))
    db.commit()

    # 서비스 검증을 거치지 않은 동시 삽입은 부분 유니크 인덱스가 막음
    db.add(AssociationTreasurer(user_id=u2.id, association_id=association.id, start_date=D("2024-03-01")))
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()

    assert rel.get_open_term(db, association.id).user_id == u1.id
