"""
services/fields.py

협회 장소(Field)와 장소 예약(FieldReservation)의 비즈니스 로직 모음.

주요 기능:
- 장소 등록 / 조회 / 부분 수정 / Soft Delete
- 장소 예약 생성 (회원 전용, 예약 규칙 + 시간 겹침 검증)
- 예약 취소(Soft Delete), 기간별 예약 조회

설계 원칙:
- HTTP / FastAPI 의존성 없음, 트랜잭션 제어는 라우터에서 수행
- 모든 시각은 UTC로 맞춘 뒤 비교 / 저장 (timezone 없는 값은 UTC로 간주)
- 예약은 [start_at, end_at) 반개구간, 취소된 예약은 겹침 / 횟수 계산에서 제외
- 겹침 검사 전에 장소 행을 잠가(FOR UPDATE) 동시 예약 간 경합 방지
- 현재 시각(now)은 인자로 받음 (라우터는 get_now 의존성 사용, 테스트는 시각 고정)

관련 파일:
- myhood.models.field     : Field / FieldReservation 모델
- myhood.schemas.field    : ReservationRules / 입력 스키마
- myhood.routers.fields   : 장소 / 예약 API

"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from myhood.core.errors import ConflictError, NotFoundError, OverlapError, ValidationError
from myhood.db.base import utcnow
from myhood.models.association import Association
from myhood.models.field import Field, FieldReservation
from myhood.models.user import User
from myhood.schemas.field import FieldCreate, FieldUpdate, ReservationPeriod, ReservationRules
from myhood.services.relations import is_member, ranges_overlap
from myhood.services.validation import validate_payload

logger = logging.getLogger(__name__)

# 예약 목록 조회 시 허용하는 최대 기간
MAX_LISTING_WINDOW = timedelta(days=30)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_field(candidate: Mapping[str, Any]) -> FieldCreate:
    return validate_payload(FieldCreate, candidate, label="field")


def _dump_rules(rules: ReservationRules | None) -> dict | None:
    return rules.model_dump(mode="json") if rules is not None else None


def rules_of(field: Field) -> ReservationRules | None:
    if field.reservation_rules is None:
        return None
    return ReservationRules.model_validate(field.reservation_rules)


# ---------------------------------------------------------------------------
# 장소
# ---------------------------------------------------------------------------

def get_field(db: Session, field_id: uuid.UUID) -> Field:
    field = db.get(Field, field_id)
    if not field:
        raise NotFoundError(f"field {field_id} not found")
    return field


def list_fields(db: Session, association_id: uuid.UUID, *, include_deleted: bool = False) -> list[Field]:
    if not db.get(Association, association_id):
        raise NotFoundError(f"association {association_id} not found")

    stmt = select(Field).where(Field.association_id == association_id)
    if not include_deleted:
        stmt = stmt.where(Field.deleted.is_(False))
    return list(db.scalars(stmt.order_by(Field.name, Field.id)).all())


def create_field(db: Session, *, association_id: uuid.UUID, data: FieldCreate) -> Field:
    if not db.get(Association, association_id):
        raise NotFoundError(f"association {association_id} not found")

    field = Field(
        association_id=association_id,
        name=data.name,
        description=data.description,
        reservation_rules=_dump_rules(data.reservation_rules),
        latitude=data.latitude,
        longitude=data.longitude,
        deleted=False,
    )
    db.add(field)
    db.flush()
    logger.info("field created", extra={"field_id": field.id, "association_id": association_id})
    return field


def update_field(db: Session, *, field_id: uuid.UUID, data: FieldUpdate) -> Field:
    field = get_field(db, field_id)
    if field.deleted:
        raise NotFoundError(f"field {field_id} not found")

    changes = data.model_dump(exclude_unset=True)
    if "reservation_rules" in changes:
        changes["reservation_rules"] = _dump_rules(data.reservation_rules)

    for key, value in changes.items():
        setattr(field, key, value)
    db.flush()
    logger.info("field updated", extra={"field_id": field.id})
    return field


# 장소 Soft Delete (이미 삭제된 장소면 그대로 반환)
def delete_field(db: Session, *, field_id: uuid.UUID) -> Field:
    field = get_field(db, field_id)
    if field.deleted:
        return field

    field.deleted = True
    db.flush()
    logger.info("field soft-deleted", extra={"field_id": field.id})
    return field


# ---------------------------------------------------------------------------
# 예약
# ---------------------------------------------------------------------------

def _lock_field(db: Session, field_id: uuid.UUID) -> Field:
    field = db.scalar(select(Field).where(Field.id == field_id).with_for_update())
    if not field or field.deleted:
        raise NotFoundError(f"field {field_id} not found")
    return field


def get_reservation(db: Session, reservation_id: uuid.UUID) -> FieldReservation:
    reservation = db.get(FieldReservation, reservation_id)
    if not reservation:
        raise NotFoundError(f"reservation {reservation_id} not found")
    return reservation


"""
예약 규칙 검사 (Daily)

- 당일(UTC) 예약만 가능
- reservations_start_at_time_utc 이전에는 예약 불가
- 예약 길이는 max_duration_minutes 이하
- 회원 1인당 하루 유효 예약 수는 max_reservations_per_period 미만이어야 새 예약 가능

"""

def check_reservation_rules(
    rules: ReservationRules,
    *,
    start_at: datetime,
    end_at: datetime,
    now: datetime,
    reservations_in_period: int,
) -> None:
    if rules.reservation_period == ReservationPeriod.DAILY:
        if start_at.date() != now.date():
            raise ValidationError(
                "reservations can only be made for today",
                fields={"start_at": "not today"},
            )
        if now.time() < rules.reservations_start_at_time_utc:
            opens_at = rules.reservations_start_at_time_utc.isoformat()
            raise ValidationError(
                f"reservations open at {opens_at} UTC",
                fields={"start_at": f"reservations open at {opens_at} UTC"},
            )

    if end_at - start_at > timedelta(minutes=rules.max_duration_minutes):
        raise ValidationError(
            f"reservations can last at most {rules.max_duration_minutes} minutes",
            fields={"end_at": "too long"},
        )
    if reservations_in_period >= rules.max_reservations_per_period:
        raise ConflictError(
            "reservation limit reached for the period",
            details={"max_reservations_per_period": rules.max_reservations_per_period},
        )


"""
장소 예약 생성

- start_at < end_at 이어야 함 (ValidationError)
- 장소가 없거나 삭제되었으면 NotFoundError, 예약자(user)도 존재해야 함
- 예약자는 장소 소유 협회의 회원이어야 함 (ValidationError)
- 예약 규칙이 있으면 규칙 검사, 같은 장소의 유효 예약과 겹치면 OverlapError

"""

def make_reservation(
    db: Session,
    *,
    field_id: uuid.UUID,
    user_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    description: str | None = None,
    now: datetime | None = None,
) -> FieldReservation:
    start_at, end_at = to_utc(start_at), to_utc(end_at)
    now = to_utc(now or utcnow())

    if end_at <= start_at:
        raise ValidationError("end_at must be after start_at", fields={"end_at": "not after start_at"})

    field = _lock_field(db, field_id)
    if not db.get(User, user_id):
        raise NotFoundError(f"user {user_id} not found")
    if not is_member(db, user_id=user_id, association_id=field.association_id):
        raise ValidationError(
            "user is not a member of the association",
            fields={"user_id": "not a member"},
        )

    rules = rules_of(field)
    if rules is not None:
        day_start = datetime.combine(start_at.date(), datetime.min.time(), tzinfo=timezone.utc)
        mine = db.scalar(
            select(func.count()).select_from(FieldReservation).where(
                FieldReservation.field_id == field.id,
                FieldReservation.user_id == user_id,
                FieldReservation.deleted.is_(False),
                FieldReservation.start_at >= day_start,
                FieldReservation.start_at < day_start + timedelta(days=1),
            )
        ) or 0
        check_reservation_rules(
            rules, start_at=start_at, end_at=end_at, now=now, reservations_in_period=mine,
        )

    candidates = db.scalars(
        select(FieldReservation).where(
            FieldReservation.field_id == field.id,
            FieldReservation.deleted.is_(False),
            FieldReservation.start_at < end_at,
            FieldReservation.end_at > start_at,
        )
    ).all()
    for other in candidates:
        other_start, other_end = to_utc(other.start_at), to_utc(other.end_at)
        if ranges_overlap(start_at, end_at, other_start, other_end):
            raise OverlapError(
                "reservation overlaps an existing reservation",
                details={
                    "conflicting_reservation_id": str(other.id),
                    "start_at": other_start.isoformat(),
                    "end_at": other_end.isoformat(),
                },
            )

    reservation = FieldReservation(
        field_id=field.id,
        user_id=user_id,
        description=description,
        start_at=start_at,
        end_at=end_at,
        deleted=False,
    )
    db.add(reservation)
    db.flush()
    logger.info("reservation created", extra={"reservation_id": reservation.id, "field_id": field.id})
    return reservation


# 예약 취소 (Soft Delete, 이미 취소된 예약이면 그대로 반환)
def cancel_reservation(db: Session, *, reservation_id: uuid.UUID) -> FieldReservation:
    reservation = get_reservation(db, reservation_id)
    if reservation.deleted:
        return reservation

    reservation.deleted = True
    db.flush()
    logger.info("reservation cancelled", extra={"reservation_id": reservation.id})
    return reservation


# 기간 [start, end)와 겹치는 유효 예약 목록 (기간은 최대 30일)
def list_reservations(
    db: Session, field_id: uuid.UUID, *, start: datetime, end: datetime
) -> list[FieldReservation]:
    start, end = to_utc(start), to_utc(end)
    if end <= start:
        raise ValidationError("end must be after start", fields={"end": "not after start"})
    if end - start > MAX_LISTING_WINDOW:
        raise ValidationError("date range too large", fields={"end": "range longer than 30 days"})

    get_field(db, field_id)
    return list(
        db.scalars(
            select(FieldReservation)
            .where(
                FieldReservation.field_id == field_id,
                FieldReservation.deleted.is_(False),
                FieldReservation.start_at < end,
                FieldReservation.end_at > start,
            )
            .order_by(FieldReservation.start_at)
        ).all()
    )
