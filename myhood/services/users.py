"""
services/users.py

회원(User) 도메인의 비즈니스 로직 모음.

주요 기능:
- 회원 입력 검증 (validate_user)
- 회원 생성 / 조회 / 부분 수정 / 삭제

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어(commit / rollback)는 라우터에서 수행
- 회원 삭제 시 가입/관리자/재무 담당 링크는 함께 삭제
- 장부(Transaction)를 작성한 회원은 감사 기록 보존을 위해 삭제 불가
- 협회의 마지막 관리자인 회원은 삭제 불가

관련 파일:
- myhood.models.user        : User 모델
- myhood.schemas.user       : 입력 / 응답 스키마
- myhood.routers.users      : 회원 API

"""

import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from myhood.core.errors import ConflictError, NotFoundError
from myhood.models.field import FieldReservation
from myhood.models.relations import AssociationAdmin, AssociationTreasurer, UserAssociation
from myhood.models.transaction import Transaction
from myhood.models.user import User
from myhood.schemas.user import UserCreate, UserUpdate
from myhood.services.relations import count_admins
from myhood.services.validation import validate_payload

logger = logging.getLogger(__name__)


"""
회원 입력 검증

- 필수 필드: name, birthday, address, uses_whatsapp
- id가 주어진 경우 UUID 형식이어야 함
- uses_whatsapp는 엄격한 boolean, email은 주소 형식 검증
- 실패 시 문제 필드 목록을 담은 ValidationError 발생

"""

def validate_user(candidate: Mapping[str, Any]) -> UserCreate:
    return validate_payload(UserCreate, candidate, label="user")


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"user {user_id} not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email))


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.name, User.id)).all())


def _ensure_email_free(db: Session, email: str | None, *, exclude: uuid.UUID | None = None) -> None:
    if email is None:
        return
    existing = get_user_by_email(db, email)
    if existing and existing.id != exclude:
        raise ConflictError("email already registered")


"""
회원 생성

- id 미지정 시 서버에서 UUID 생성
- id / email 중복 생성 불가
- 생성 즉시 DB flush 수행

"""

def create_user(db: Session, data: UserCreate) -> User:
    if data.id is not None and db.get(User, data.id):
        raise ConflictError(f"user {data.id} already exists")
    _ensure_email_free(db, data.email)

    values = data.model_dump(exclude={"id"})
    user = User(**values)
    if data.id is not None:
        user.id = data.id

    db.add(user)
    db.flush()
    logger.info("user created", extra={"user_id": user.id})
    return user


"""
회원 부분 수정

- 요청에 포함된 필드만 변경 (미포함 필드는 기존 값 유지)
- id는 변경 불가 (UserUpdate 스키마에서 차단)

"""

def update_user(db: Session, *, user_id: uuid.UUID, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    if "email" in changes:
        _ensure_email_free(db, changes["email"], exclude=user.id)

    for key, value in changes.items():
        setattr(user, key, value)

    db.flush()
    logger.info("user updated", extra={"user_id": user.id})
    return user


def delete_user(db: Session, *, user_id: uuid.UUID) -> None:
    user = get_user(db, user_id)

    authored = db.scalar(
        select(func.count()).select_from(Transaction).where(Transaction.creator_id == user.id)
    ) or 0
    if authored:
        raise ConflictError("user has recorded transactions and cannot be deleted")

    # 마지막 관리자인 협회가 있으면 삭제 불가 (관리자 없는 협회 방지)
    for admin in db.scalars(select(AssociationAdmin).where(AssociationAdmin.user_id == user.id)).all():
        if count_admins(db, admin.association_id) <= 1:
            raise ConflictError(
                "user is the last admin of an association and cannot be deleted",
                details={"association_id": str(admin.association_id)},
            )

    # DB의 ON DELETE CASCADE와 동일한 결과를 ORM 레벨에서도 보장
    db.execute(delete(FieldReservation).where(FieldReservation.user_id == user.id))
    db.execute(delete(AssociationTreasurer).where(AssociationTreasurer.user_id == user.id))
    db.execute(delete(AssociationAdmin).where(AssociationAdmin.user_id == user.id))
    db.execute(delete(UserAssociation).where(UserAssociation.user_id == user.id))
    db.delete(user)
    db.flush()
    logger.info("user deleted", extra={"user_id": user_id})
