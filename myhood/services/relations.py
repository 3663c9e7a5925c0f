"""
services/relations.py

회원 가입 / 관리자 / 재무 담당 관계에 대한 비즈니스 로직 모음.

이 파일은 User - Association 간 링크의 생성/해제와
역할(관리자, 재무 담당) 부여 시 지켜야 할 제약을 한 곳에서 검증한다.

주요 기능:
- 회원 가입 링크 생성 / 해제 / 목록
- 관리자 지정 / 해제 / 목록, 마지막 관리자 보호
- 재무 담당 임기 지정 / 종료 / 목록, 임기 겹침 방지
- 권한 판단용 조회 (is_member / is_admin / is_treasurer)

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어는 라우터에서 수행
- 중복/겹침 검사 전에 협회 행을 잠가(FOR UPDATE) 동시 요청 간 경합 방지
- 재무 담당 임기는 [start_date, end_date) 반개구간, end_date 없음 = 무기한

관련 파일:
- myhood.models.relations   : 관계 모델
- myhood.routers.relations  : 관계 API
- myhood.core.deps          : 권한 의존성에서 is_admin / is_treasurer 사용

"""

import logging
import uuid
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from myhood.core.errors import ConflictError, NotFoundError, OverlapError, ValidationError
from myhood.models.association import Association
from myhood.models.relations import AssociationAdmin, AssociationTreasurer, UserAssociation
from myhood.models.user import User

logger = logging.getLogger(__name__)


def _ensure_association(db: Session, association_id: uuid.UUID) -> Association:
    association = db.get(Association, association_id)
    if not association:
        raise NotFoundError(f"association {association_id} not found")
    return association


def _lock_association(db: Session, association_id: uuid.UUID) -> Association:
    association = db.scalar(
        select(Association).where(Association.id == association_id).with_for_update()
    )
    if not association:
        raise NotFoundError(f"association {association_id} not found")
    return association


def _ensure_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"user {user_id} not found")
    return user


def _ensure_member(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> None:
    if not is_member(db, user_id=user_id, association_id=association_id):
        raise ValidationError(
            "user is not a member of the association",
            fields={"user_id": "not a member"},
        )


def is_member(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> bool:
    return db.get(UserAssociation, (user_id, association_id)) is not None


def is_admin(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> bool:
    return db.get(AssociationAdmin, (user_id, association_id)) is not None


def count_admins(db: Session, association_id: uuid.UUID) -> int:
    return db.scalar(
        select(func.count()).select_from(AssociationAdmin).where(AssociationAdmin.association_id == association_id)
    ) or 0


# ---------------------------------------------------------------------------
# 회원 가입 링크
# ---------------------------------------------------------------------------

"""
회원 가입 링크 생성

- user / association 모두 존재해야 함 (NotFoundError)
- 같은 (user_id, association_id) 쌍은 한 번만 생성 가능 (ConflictError)

"""

def link_user_to_association(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> UserAssociation:
    _ensure_user(db, user_id)
    _lock_association(db, association_id)

    if is_member(db, user_id=user_id, association_id=association_id):
        raise ConflictError("user is already a member of the association")

    link = UserAssociation(user_id=user_id, association_id=association_id)
    db.add(link)
    db.flush()
    logger.info("member linked", extra={"user_id": user_id, "association_id": association_id})
    return link


"""
회원 가입 링크 해제

- 링크가 없으면 NotFoundError
- 해당 회원의 관리자 / 재무 담당 기록도 함께 삭제
- 마지막 관리자는 탈퇴시킬 수 없음 (다른 관리자를 먼저 지정해야 함)

"""

def unlink_user_from_association(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> None:
    _lock_association(db, association_id)
    link = db.get(UserAssociation, (user_id, association_id))
    if not link:
        raise NotFoundError("membership not found")

    if is_admin(db, user_id=user_id, association_id=association_id) and count_admins(db, association_id) <= 1:
        raise ConflictError("cannot remove the last admin of the association")

    db.execute(
        delete(AssociationTreasurer).where(
            AssociationTreasurer.user_id == user_id,
            AssociationTreasurer.association_id == association_id,
        )
    )
    db.execute(
        delete(AssociationAdmin).where(
            AssociationAdmin.user_id == user_id,
            AssociationAdmin.association_id == association_id,
        )
    )
    db.delete(link)
    db.flush()
    logger.info("member unlinked", extra={"user_id": user_id, "association_id": association_id})


def list_members(db: Session, association_id: uuid.UUID) -> list[UserAssociation]:
    _ensure_association(db, association_id)
    return list(
        db.scalars(
            select(UserAssociation)
            .where(UserAssociation.association_id == association_id)
            .order_by(UserAssociation.created_at, UserAssociation.user_id)
        ).all()
    )


# ---------------------------------------------------------------------------
# 관리자
# ---------------------------------------------------------------------------

def assign_admin(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> AssociationAdmin:
    _ensure_user(db, user_id)
    _lock_association(db, association_id)
    _ensure_member(db, user_id=user_id, association_id=association_id)

    if is_admin(db, user_id=user_id, association_id=association_id):
        raise ConflictError("user is already an admin of the association")

    admin = AssociationAdmin(user_id=user_id, association_id=association_id)
    db.add(admin)
    db.flush()
    logger.info("admin assigned", extra={"user_id": user_id, "association_id": association_id})
    return admin


def revoke_admin(db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID) -> None:
    _lock_association(db, association_id)
    admin = db.get(AssociationAdmin, (user_id, association_id))
    if not admin:
        raise NotFoundError("admin role not found")

    # 마지막 관리자 해제 금지
    if count_admins(db, association_id) <= 1:
        raise ConflictError("cannot revoke the last admin of the association")

    db.delete(admin)
    db.flush()
    logger.info("admin revoked", extra={"user_id": user_id, "association_id": association_id})


def list_admins(db: Session, association_id: uuid.UUID) -> list[AssociationAdmin]:
    _ensure_association(db, association_id)
    return list(
        db.scalars(
            select(AssociationAdmin)
            .where(AssociationAdmin.association_id == association_id)
            .order_by(AssociationAdmin.created_at, AssociationAdmin.user_id)
        ).all()
    )


# ---------------------------------------------------------------------------
# 재무 담당 임기
# ---------------------------------------------------------------------------

def ranges_overlap(start_a, end_a, start_b, end_b) -> bool:
    # 반개구간 [start, end), end가 None이면 무기한 (date / datetime 모두 사용)
    a_before_b_ends = end_b is None or start_a < end_b
    b_before_a_ends = end_a is None or start_b < end_a
    return a_before_b_ends and b_before_a_ends


"""
재무 담당 임기 지정

- end_date가 있으면 start_date <= end_date 여야 함 (ValidationError)
- user / association 존재 필수 (NotFoundError), 해당 협회 회원이어야 함
- 같은 협회의 기존 임기와 기간이 겹치면 OverlapError
  (열린 임기가 있으면 그 이후의 모든 임기와 겹치므로 열린 임기는 협회당 최대 1개)

"""

def assign_treasurer(
    db: Session,
    *,
    user_id: uuid.UUID,
    association_id: uuid.UUID,
    start_date: date,
    end_date: date | None = None,
) -> AssociationTreasurer:
    if end_date is not None and end_date < start_date:
        raise ValidationError(
            "end_date must not be before start_date",
            fields={"end_date": "before start_date"},
        )

    _ensure_user(db, user_id)
    _lock_association(db, association_id)
    _ensure_member(db, user_id=user_id, association_id=association_id)

    terms = db.scalars(
        select(AssociationTreasurer).where(AssociationTreasurer.association_id == association_id)
    ).all()
    for term in terms:
        if ranges_overlap(start_date, end_date, term.start_date, term.end_date):
            raise OverlapError(
                "treasurer term overlaps an existing term",
                details={
                    "conflicting_term_id": str(term.id),
                    "start_date": term.start_date.isoformat(),
                    "end_date": term.end_date.isoformat() if term.end_date else None,
                },
            )

    term = AssociationTreasurer(
        user_id=user_id,
        association_id=association_id,
        start_date=start_date,
        end_date=end_date,
    )
    db.add(term)
    db.flush()
    logger.info("treasurer assigned", extra={"user_id": user_id, "association_id": association_id})
    return term


def get_open_term(db: Session, association_id: uuid.UUID) -> AssociationTreasurer | None:
    return db.scalar(
        select(AssociationTreasurer).where(
            AssociationTreasurer.association_id == association_id,
            AssociationTreasurer.end_date.is_(None),
        )
    )


"""
열린 재무 담당 임기 종료

- 열린 임기가 없으면 NotFoundError
- end_date < start_date 이면 ValidationError
- 닫힌 임기는 다시 열 수 없음 (open -> closed 단방향)

"""

def close_treasurer_term(db: Session, *, association_id: uuid.UUID, end_date: date) -> AssociationTreasurer:
    _lock_association(db, association_id)
    term = get_open_term(db, association_id)
    if not term:
        raise NotFoundError("no open treasurer term for the association")

    if end_date < term.start_date:
        raise ValidationError(
            "end_date must not be before start_date",
            fields={"end_date": "before start_date"},
        )

    term.end_date = end_date
    db.flush()
    logger.info("treasurer term closed", extra={"user_id": term.user_id, "association_id": association_id})
    return term


def list_treasurer_terms(db: Session, association_id: uuid.UUID) -> list[AssociationTreasurer]:
    _ensure_association(db, association_id)
    return list(
        db.scalars(
            select(AssociationTreasurer)
            .where(AssociationTreasurer.association_id == association_id)
            .order_by(AssociationTreasurer.start_date)
        ).all()
    )


def current_treasurer(
    db: Session, association_id: uuid.UUID, *, on: date | None = None
) -> AssociationTreasurer | None:
    on = on or date.today()
    return db.scalar(
        select(AssociationTreasurer).where(
            AssociationTreasurer.association_id == association_id,
            AssociationTreasurer.start_date <= on,
            (AssociationTreasurer.end_date.is_(None)) | (AssociationTreasurer.end_date > on),
        )
    )


def is_treasurer(
    db: Session, *, user_id: uuid.UUID, association_id: uuid.UUID, on: date | None = None
) -> bool:
    term = current_treasurer(db, association_id, on=on)
    return term is not None and term.user_id == user_id
