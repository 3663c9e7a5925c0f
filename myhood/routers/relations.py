"""
relations.py

협회 회원 / 관리자 / 재무 담당 관리 API 모음.

주요 기능:
- 회원 가입 링크 생성 / 해제 / 목록
- 관리자 지정 / 해제 / 목록
- 재무 담당 임기 지정 / 종료 / 목록

설계 원칙:
- 조회는 협회 회원 이상, 변경은 협회 관리자만 가능
- 중복 / 겹침 / 존재 여부 검증은 service 계층(myhood.services.relations)에서 처리

"""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from myhood.core.deps import get_db, require_association_admin, require_association_member
from myhood.models.user import User
from myhood.schemas.relations import (
    AdminAssignRequest,
    AdminResponse,
    MemberLinkRequest,
    MembershipResponse,
    TreasurerAssignRequest,
    TreasurerCloseRequest,
    TreasurerTermResponse,
)
from myhood.services import relations as relations_service

router = APIRouter(prefix="/associations/{association_id}", tags=["relations"])


# ---- 회원 ----

@router.get("/members", response_model=list[MembershipResponse])
def list_members(
    association_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_member),
):
    return relations_service.list_members(db, association_id)


@router.post("/members", response_model=MembershipResponse, status_code=status.HTTP_201_CREATED)
def add_member(
    association_id: uuid.UUID,
    body: MemberLinkRequest,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        link = relations_service.link_user_to_association(db, user_id=body.user_id, association_id=association_id)
        db.commit()
        db.refresh(link)
        return link
    except Exception:
        db.rollback()
        raise


@router.delete("/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    association_id: uuid.UUID,
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        relations_service.unlink_user_from_association(db, user_id=user_id, association_id=association_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---- 관리자 ----

@router.get("/admins", response_model=list[AdminResponse])
def list_admins(
    association_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_member),
):
    return relations_service.list_admins(db, association_id)


@router.post("/admins", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
def add_admin(
    association_id: uuid.UUID,
    body: AdminAssignRequest,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        admin = relations_service.assign_admin(db, user_id=body.user_id, association_id=association_id)
        db.commit()
        db.refresh(admin)
        return admin
    except Exception:
        db.rollback()
        raise


@router.delete("/admins/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_admin(
    association_id: uuid.UUID,
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        relations_service.revoke_admin(db, user_id=user_id, association_id=association_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---- 재무 담당 ----

@router.get("/treasurers", response_model=list[TreasurerTermResponse])
def list_treasurers(
    association_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_member),
):
    return relations_service.list_treasurer_terms(db, association_id)


@router.post("/treasurers", response_model=TreasurerTermResponse, status_code=status.HTTP_201_CREATED)
def add_treasurer(
    association_id: uuid.UUID,
    body: TreasurerAssignRequest,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        term = relations_service.assign_treasurer(
            db,
            user_id=body.user_id,
            association_id=association_id,
            start_date=body.start_date,
            end_date=body.end_date,
        )
        db.commit()
        db.refresh(term)
        return term
    except Exception:
        db.rollback()
        raise


@router.post("/treasurers/close", response_model=TreasurerTermResponse)
def close_treasurer(
    association_id: uuid.UUID,
    body: TreasurerCloseRequest,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        term = relations_service.close_treasurer_term(db, association_id=association_id, end_date=body.end_date)
        db.commit()
        db.refresh(term)
        return term
    except Exception:
        db.rollback()
        raise
