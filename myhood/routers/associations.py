"""
associations.py

협회(Association) API 모음.

주요 기능:
- 협회 생성 (생성자가 첫 회원이자 관리자가 됨)
- 협회 목록 / 단건 조회
- 협회 정보 수정 / 삭제 (협회 관리자 전용)

관련 파일:
- myhood.services.associations  : 협회 생성 / 삭제 로직
- myhood.routers.relations      : 회원 / 관리자 / 재무 담당 API

"""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from myhood.core.deps import get_db, get_user_or_global_admin, require_association_admin
from myhood.models.user import User
from myhood.schemas.association import AssociationCreate, AssociationResponse, AssociationUpdate
from myhood.services import associations as associations_service

router = APIRouter(prefix="/associations", tags=["associations"])


@router.post("", response_model=AssociationResponse, status_code=status.HTTP_201_CREATED)
def create_association(
    body: AssociationCreate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_user_or_global_admin),
):
    # 회원 레코드 없는 전역 관리자가 만들면 설립자 없이 생성 (이후 회원 / 관리자 지정)
    founder_id = current_user.id if current_user else None
    try:
        association = associations_service.create_association(db, body, founder_id=founder_id)
        db.commit()
        db.refresh(association)
        return association
    except Exception:
        db.rollback()
        raise


@router.get("", response_model=list[AssociationResponse])
def list_associations(
    db: Session = Depends(get_db),
    _: User | None = Depends(get_user_or_global_admin),
):
    return associations_service.list_associations(db)


@router.get("/{association_id}", response_model=AssociationResponse)
def read_association(
    association_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(get_user_or_global_admin),
):
    return associations_service.get_association(db, association_id)


@router.patch("/{association_id}", response_model=AssociationResponse)
def update_association(
    association_id: uuid.UUID,
    body: AssociationUpdate,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        association = associations_service.update_association(db, association_id=association_id, data=body)
        db.commit()
        db.refresh(association)
        return association
    except Exception:
        db.rollback()
        raise


@router.delete("/{association_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_association(
    association_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        associations_service.delete_association(db, association_id=association_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)
