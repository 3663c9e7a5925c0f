"""
services/associations.py

협회(Association) 도메인의 비즈니스 로직 모음.

주요 기능:
- 협회 입력 검증 (validate_association)
- 협회 생성 (설립자를 회원 + 관리자로 등록 가능)
- 협회 조회 / 부분 수정 / 삭제

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어는 라우터에서 수행
- 장부가 남아 있는 협회는 삭제 불가

"""

import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from myhood.core.errors import ConflictError, NotFoundError
from myhood.models.association import Association
from myhood.models.field import Field, FieldReservation
from myhood.models.relations import AssociationAdmin, AssociationTreasurer, UserAssociation
from myhood.models.transaction import Transaction
from myhood.schemas.association import AssociationCreate, AssociationUpdate
from myhood.services.relations import assign_admin, link_user_to_association
from myhood.services.validation import validate_payload

logger = logging.getLogger(__name__)


def validate_association(candidate: Mapping[str, Any]) -> AssociationCreate:
    return validate_payload(AssociationCreate, candidate, label="association")


def get_association(db: Session, association_id: uuid.UUID) -> Association:
    association = db.get(Association, association_id)
    if not association:
        raise NotFoundError(f"association {association_id} not found")
    return association


def list_associations(db: Session) -> list[Association]:
    return list(db.scalars(select(Association).order_by(Association.name, Association.id)).all())


"""
협회 생성

- id 중복 생성 불가
- founder_id가 주어지면 해당 회원을 첫 회원이자 관리자로 등록
  (관리자가 한 명도 없는 협회가 생기지 않도록)

"""

def create_association(
    db: Session,
    data: AssociationCreate,
    *,
    founder_id: uuid.UUID | None = None,
) -> Association:
    if data.id is not None and db.get(Association, data.id):
        raise ConflictError(f"association {data.id} already exists")

    association = Association(**data.model_dump(exclude={"id"}))
    if data.id is not None:
        association.id = data.id
    db.add(association)
    db.flush()

    if founder_id is not None:
        link_user_to_association(db, user_id=founder_id, association_id=association.id)
        assign_admin(db, user_id=founder_id, association_id=association.id)

    logger.info("association created", extra={"association_id": association.id})
    return association


def update_association(db: Session, *, association_id: uuid.UUID, data: AssociationUpdate) -> Association:
    association = get_association(db, association_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(association, key, value)
    db.flush()
    logger.info("association updated", extra={"association_id": association.id})
    return association


def delete_association(db: Session, *, association_id: uuid.UUID) -> None:
    association = get_association(db, association_id)

    ledger_rows = db.scalar(
        select(func.count()).select_from(Transaction).where(Transaction.association_id == association.id)
    ) or 0
    if ledger_rows:
        raise ConflictError("association has ledger transactions and cannot be deleted")

    field_ids = select(Field.id).where(Field.association_id == association.id)
    db.execute(delete(FieldReservation).where(FieldReservation.field_id.in_(field_ids)))
    db.execute(delete(Field).where(Field.association_id == association.id))
    db.execute(delete(AssociationTreasurer).where(AssociationTreasurer.association_id == association.id))
    db.execute(delete(AssociationAdmin).where(AssociationAdmin.association_id == association.id))
    db.execute(delete(UserAssociation).where(UserAssociation.association_id == association.id))
    db.delete(association)
    db.flush()
    logger.info("association deleted", extra={"association_id": association_id})
