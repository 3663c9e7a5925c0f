import uuid
import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from myhood.db.base import Base, TimestampMixin


class Transaction(TimestampMixin, Base):
    """협회 장부(ledger)의 수입/지출 기록.

    - amount: 부호 있는 고정 소수점 금액 (수입 +, 지출 -)
    - deleted: Soft Delete 플래그. 물리 삭제는 하지 않으며 잔액 계산에서만 제외
    - 장부가 남아 있는 협회/작성자는 물리 삭제할 수 없음 (RESTRICT)
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_association_id", "association_id"),
        Index("ix_transactions_creator_id", "creator_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    association_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("associations.id", ondelete="RESTRICT"), nullable=False
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    details: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    reference_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
