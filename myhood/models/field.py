"""
field.py

협회 소유 장소(Field)와 장소 예약(FieldReservation) 모델 정의 파일.

- Field            : 협회가 관리하는 장소 (코트, 운동장 등), 위도/경도와 예약 규칙(JSON)
- FieldReservation : 회원의 장소 예약, [start_at, end_at) 반개구간

설계 원칙:
- 장소 / 예약 모두 물리 삭제하지 않고 deleted 플래그만 변경
- 예약 규칙은 스키마(ReservationRules)로 검증한 뒤 JSON 그대로 저장
- 같은 장소의 유효한 예약끼리 시간 겹침 금지 (myhood.services.fields 에서 검증)
- 협회 / 회원 삭제 시 하위 장소 / 예약은 CASCADE 삭제

"""

import uuid
import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from myhood.db.base import Base, TimestampMixin


class Field(TimestampMixin, Base):
    __tablename__ = "fields"
    __table_args__ = (
        Index("ix_fields_association_id", "association_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    association_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("associations.id", ondelete="CASCADE"), nullable=False
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # None이면 예약 제한 없음 (겹침 검사만 수행)
    reservation_rules: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    latitude: Mapped[Decimal] = mapped_column(Numeric(9, 6), nullable=False)
    longitude: Mapped[Decimal] = mapped_column(Numeric(9, 6), nullable=False)

    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


"""
장소 예약 모델

- start_at : 예약 시작 시각 (포함, UTC)
- end_at   : 예약 종료 시각 (미포함, UTC)
- deleted  : 예약 취소 플래그. 취소된 예약은 겹침 / 횟수 제한 계산에서 제외

"""

class FieldReservation(TimestampMixin, Base):
    __tablename__ = "field_reservations"
    __table_args__ = (
        CheckConstraint("start_at < end_at", name="ck_field_reservations_time_range"),
        Index("ix_field_reservations_field_id_start_at", "field_id", "start_at"),
        Index("ix_field_reservations_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    field_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fields.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    start_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
