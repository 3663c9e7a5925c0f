"""
user.py

사용자(User) 모델 정의 파일.

이 파일은 회원의 기본 신원 정보(이름, 생년월일, 주소)와
연락 수단(이메일, 전화번호, WhatsApp 사용 여부)을 관리한다.

협회(Association) 가입, 관리자/재무 담당 지정,
거래(Transaction) 기록의 기준이 되는 핵심 모델이다.

"""

import uuid
import datetime

from sqlalchemy import Boolean, Date, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from myhood.db.base import Base, TimestampMixin


"""
사용자(User) 모델

- id는 서버에서 생성하며 생성 이후 변경 불가
- email은 선택 항목이지만 입력된 경우 고유해야 함
- identities: 신분증 등 신원 문서 번호를 쉼표(,)로 구분하여 저장
- uses_whatsapp: 메신저(WhatsApp)로 연락 가능한지 여부

"""

class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    birthday: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    activity: Mapped[str | None] = mapped_column(String(120), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    personal_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    commercial_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    uses_whatsapp: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    identities: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
