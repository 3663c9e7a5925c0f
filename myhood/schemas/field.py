import json
import uuid
from datetime import datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from myhood.schemas.common import Name, reject_null


class ReservationPeriod(str, Enum):
    DAILY = "Daily"


# 🔹 장소 예약 규칙 (Field.reservation_rules 에 JSON으로 저장)
class ReservationRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # 이 시각(UTC) 이후부터 당일 예약 가능
    reservations_start_at_time_utc: time = Field(..., examples=["06:00:00"])
    max_duration_minutes: int = Field(..., gt=0, le=24 * 60, examples=[60])
    # 기간(period)당 회원 1인이 가질 수 있는 유효 예약 수
    max_reservations_per_period: int = Field(..., gt=0, examples=[1])
    reservation_period: ReservationPeriod = ReservationPeriod.DAILY


def _rules_from_json_text(value):
    # 규칙을 JSON 문자열로 보내는 클라이언트도 허용
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            raise ValueError("reservation_rules must be a JSON object") from None
    return value


class FieldCreate(BaseModel):
    name: Name = Field(..., examples=["Quadra de areia"])
    description: Optional[str] = None
    reservation_rules: Optional[ReservationRules] = None
    latitude: Decimal = Field(..., ge=-90, le=90, max_digits=9, decimal_places=6, examples=["-16.420000"])
    longitude: Decimal = Field(..., ge=-180, le=180, max_digits=9, decimal_places=6, examples=["-39.070000"])

    @field_validator("reservation_rules", mode="before")
    @classmethod
    def parse_rules(cls, value):
        return _rules_from_json_text(value)


class FieldUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[Name] = None
    description: Optional[str] = None
    # null을 보내면 예약 규칙 제거
    reservation_rules: Optional[ReservationRules] = None
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90, max_digits=9, decimal_places=6)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180, max_digits=9, decimal_places=6)

    @field_validator("name", "latitude", "longitude", mode="before")
    @classmethod
    def required_not_null(cls, value):
        return reject_null(value)

    @field_validator("reservation_rules", mode="before")
    @classmethod
    def parse_rules(cls, value):
        return _rules_from_json_text(value)


class FieldResponse(BaseModel):
    id: uuid.UUID
    association_id: uuid.UUID
    name: str
    description: Optional[str]
    reservation_rules: Optional[ReservationRules]
    latitude: Decimal
    longitude: Decimal
    deleted: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# 🔹 예약 요청 (예약자 = 요청한 사용자, timezone 없는 시각은 UTC로 간주)
class ReservationCreate(BaseModel):
    start_at: datetime = Field(..., examples=["2024-01-01T10:00:00Z"])
    end_at: datetime = Field(..., examples=["2024-01-01T11:00:00Z"])
    description: Optional[str] = Field(default=None, max_length=500)


class ReservationResponse(BaseModel):
    id: uuid.UUID
    field_id: uuid.UUID
    user_id: uuid.UUID
    description: Optional[str]
    start_at: datetime
    end_at: datetime
    deleted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
