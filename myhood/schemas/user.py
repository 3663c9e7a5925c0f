import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictBool, field_validator

from myhood.schemas.common import Address, Email, Name, Phone, ProfileUrl, reject_null


# 🔹 회원 생성/가입 시 공통 필드
class UserFields(BaseModel):
    name: Name
    birthday: date
    address: Address
    activity: Optional[str] = None
    personal_phone: Optional[Phone] = None
    commercial_phone: Optional[Phone] = None
    # "true" 같은 문자열은 허용하지 않음
    uses_whatsapp: StrictBool
    identities: Optional[str] = None
    profile_url: Optional[ProfileUrl] = None


# 🔹 전역 관리자가 회원을 직접 등록할 때 (id는 선택, 없으면 서버에서 생성)
class UserCreate(UserFields):
    id: Optional[uuid.UUID] = None
    email: Optional[Email] = None


# 🔹 본인 가입용 (email은 토큰에서 가져옴)
class OwnUserCreate(UserFields):
    pass


# 🔹 부분 수정 요청 (id 변경 불가 -> extra 금지)
class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[Name] = None
    birthday: Optional[date] = None
    address: Optional[Address] = None
    activity: Optional[str] = None
    email: Optional[Email] = None
    personal_phone: Optional[Phone] = None
    commercial_phone: Optional[Phone] = None
    uses_whatsapp: Optional[StrictBool] = None
    identities: Optional[str] = None
    profile_url: Optional[ProfileUrl] = None

    # 생략은 허용, 필수 항목을 null로 지우는 것은 불가
    @field_validator("name", "birthday", "address", "uses_whatsapp", mode="before")
    @classmethod
    def required_not_null(cls, value):
        return reject_null(value)


# 🔹 유저 응답용
class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    birthday: date
    address: str
    activity: Optional[str]
    email: Optional[str]
    personal_phone: Optional[str]
    commercial_phone: Optional[str]
    uses_whatsapp: bool
    identities: Optional[str]
    profile_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)  # SQLAlchemy → Pydantic 변환
