"""

relations.py

사용자(User) - 협회(Association) 간 관계 모델 정의 파일.

- UserAssociation      : 회원 가입(membership) 링크, (user_id, association_id) 복합 키
- AssociationAdmin     : 협회 관리자 역할 링크, 회원 링크를 복합 외래 키로 참조
- AssociationTreasurer : 기간이 있는 재무 담당 임기 [start_date, end_date)

설계 원칙:
- 관리자/재무 담당은 반드시 회원 링크가 먼저 존재해야 함 (복합 FK로 강제)
- 회원 링크 삭제 또는 User / Association 삭제 시 하위 링크는 모두 CASCADE 삭제
- 협회당 열린(end_date 없음) 임기는 최대 1개 (partial unique index)
- 임기 겹침 여부는 myhood.services.relations 에서 검증

"""

import uuid
import datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from myhood.db.base import Base, utcnow


class UserAssociation(Base):
    __tablename__ = "user_associations"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    association_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("associations.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class AssociationAdmin(Base):
    __tablename__ = "association_admins"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id", "association_id"],
            ["user_associations.user_id", "user_associations.association_id"],
            ondelete="CASCADE",
            name="fk_association_admins_membership",
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    association_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


"""
재무 담당 임기 모델

- start_date : 임기 시작일 (포함)
- end_date   : 임기 종료일 (미포함), None이면 열린 임기
- 한 번 닫힌 임기는 다시 열 수 없음 (open -> closed 단방향)

"""

class AssociationTreasurer(Base):
    __tablename__ = "association_treasurers"
    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id", "association_id"],
            ["user_associations.user_id", "user_associations.association_id"],
            ondelete="CASCADE",
            name="fk_association_treasurers_membership",
        ),
        CheckConstraint(
            "end_date IS NULL OR start_date <= end_date",
            name="ck_association_treasurers_date_range",
        ),
        Index("ix_association_treasurers_association_id", "association_id"),
        Index(
            "uq_association_treasurers_open_term",
            "association_id",
            unique=True,
            postgresql_where=text("end_date IS NULL"),
            sqlite_where=text("end_date IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    association_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def is_open(self) -> bool:
        return self.end_date is None
