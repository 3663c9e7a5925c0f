import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from myhood.db.base import Base, TimestampMixin


class Association(TimestampMixin, Base):
    """협회(동네 모임) 레코드.

    identity: 사업자/단체 등록 번호 등 (선택)
    """

    __tablename__ = "associations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    neighborhood: Mapped[str] = mapped_column(String(120), nullable=False)
    country: Mapped[str] = mapped_column(String(80), nullable=False)
    state: Mapped[str] = mapped_column(String(80), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    identity: Mapped[str | None] = mapped_column(String(80), nullable=True)
