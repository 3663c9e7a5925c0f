"""
fields.py

협회 장소(Field) / 장소 예약(FieldReservation) API 모음.

주요 기능:
- 장소 등록 / 목록 / 조회 / 수정 / Soft Delete (등록 / 수정 / 삭제는 협회 관리자 전용)
- 장소 예약 생성 (협회 회원 본인 명의로만 가능)
- 기간별 예약 조회, 예약 취소

설계 원칙:
- 예약 규칙 / 겹침 검증은 service 계층(myhood.services.fields)에 위임
- 현재 시각은 get_now 의존성으로 주입 (테스트에서 고정 가능)
- 도메인 예외는 rollback 후 전역 핸들러로 전파

"""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from myhood.core.deps import (
    get_current_user,
    get_db,
    get_now,
    require_association_admin,
    require_association_member,
    require_field_admin,
    require_field_member,
    require_reservation_canceller,
)
from myhood.models.field import Field, FieldReservation
from myhood.models.user import User
from myhood.schemas.field import (
    FieldCreate,
    FieldResponse,
    FieldUpdate,
    ReservationCreate,
    ReservationResponse,
)
from myhood.services import fields as fields_service

router = APIRouter(tags=["fields"])


# ---- 장소 ----

@router.post(
    "/associations/{association_id}/fields",
    response_model=FieldResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_field(
    association_id: uuid.UUID,
    body: FieldCreate,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_admin),
):
    try:
        field = fields_service.create_field(db, association_id=association_id, data=body)
        db.commit()
        db.refresh(field)
        return field
    except Exception:
        db.rollback()
        raise


@router.get("/associations/{association_id}/fields", response_model=list[FieldResponse])
def list_fields(
    association_id: uuid.UUID,
    include_deleted: bool = Query(default=False),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_member),
):
    return fields_service.list_fields(db, association_id, include_deleted=include_deleted)


@router.get("/fields/{field_id}", response_model=FieldResponse)
def read_field(field: Field = Depends(require_field_member)):
    return field


@router.patch("/fields/{field_id}", response_model=FieldResponse)
def update_field(
    body: FieldUpdate,
    db: Session = Depends(get_db),
    field: Field = Depends(require_field_admin),
):
    try:
        field = fields_service.update_field(db, field_id=field.id, data=body)
        db.commit()
        db.refresh(field)
        return field
    except Exception:
        db.rollback()
        raise


@router.delete("/fields/{field_id}", response_model=FieldResponse)
def delete_field(
    db: Session = Depends(get_db),
    field: Field = Depends(require_field_admin),
):
    try:
        field = fields_service.delete_field(db, field_id=field.id)
        db.commit()
        db.refresh(field)
        return field
    except Exception:
        db.rollback()
        raise


# ---- 예약 ----

@router.get("/fields/{field_id}/reservations", response_model=list[ReservationResponse])
def list_reservations(
    start: datetime = Query(..., description="예: 2024-01-01T00:00:00Z"),
    end: datetime = Query(..., description="start로부터 최대 30일"),
    db: Session = Depends(get_db),
    field: Field = Depends(require_field_member),
):
    return fields_service.list_reservations(db, field.id, start=start, end=end)


"""
장소 예약 API

- 예약자는 항상 요청한 사용자 (회원 레코드가 있는 토큰 필요)
- 협회 회원이 아니면 403 (전역 관리자라도 회원이 아니면 서비스에서 400)

"""
@router.post(
    "/fields/{field_id}/reservations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_reservation(
    body: ReservationCreate,
    db: Session = Depends(get_db),
    field: Field = Depends(require_field_member),
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        reservation = fields_service.make_reservation(
            db,
            field_id=field.id,
            user_id=current_user.id,
            start_at=body.start_at,
            end_at=body.end_at,
            description=body.description,
            now=now,
        )
        db.commit()
        db.refresh(reservation)
        return reservation
    except Exception:
        db.rollback()
        raise


@router.delete("/reservations/{reservation_id}", response_model=ReservationResponse)
def cancel_reservation(
    db: Session = Depends(get_db),
    reservation: FieldReservation = Depends(require_reservation_canceller),
):
    try:
        reservation = fields_service.cancel_reservation(db, reservation_id=reservation.id)
        db.commit()
        db.refresh(reservation)
        return reservation
    except Exception:
        db.rollback()
        raise
