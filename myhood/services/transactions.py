"""
services/transactions.py

협회 장부(Transaction) 도메인의 비즈니스 로직 모음.

이 파일은 수입/지출 기록 생성, Soft Delete, 잔액 계산 등
장부의 핵심 규칙을 담당한다.

설계 원칙:
- 금액은 항상 Decimal(소수점 2자리)로 다룸 (float 오차 방지)
- 기록은 물리 삭제하지 않고 deleted 플래그만 변경 (감사 기록 보존)
- 잔액은 deleted=False 기록만 합산
- 트랜잭션 제어는 라우터에서 수행

관련 파일:
- myhood.models.transaction     : Transaction 모델
- myhood.routers.transactions   : 장부 API

"""

import logging
import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from myhood.core.errors import NotFoundError, ValidationError
from myhood.models.association import Association
from myhood.models.transaction import Transaction
from myhood.models.user import User

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Numeric(14, 2) 컬럼이 담을 수 있는 최대 절댓값 미만
_AMOUNT_LIMIT = Decimal(10) ** 12


"""
금액 검증 및 정규화

- bool / 숫자가 아닌 문자열 / NaN / Infinity 거부
- 소수점 이하 2자리 초과 거부 (반올림하지 않음)
- 컬럼 범위를 넘는 금액 거부
- 통과하면 소수점 2자리로 맞춘 Decimal 반환

"""

def normalize_amount(amount: Any) -> Decimal:
    if isinstance(amount, bool):
        raise ValidationError("amount must be a number", fields={"amount": "not a number"})

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("amount must be a number", fields={"amount": "not a number"}) from None

    if not value.is_finite():
        raise ValidationError("amount must be finite", fields={"amount": "not finite"})
    # quantize는 정밀도(28자리)를 넘는 값에서 InvalidOperation을 내므로 범위 검사를 먼저 수행
    if abs(value) >= _AMOUNT_LIMIT:
        raise ValidationError("amount is out of range", fields={"amount": "out of range"})
    if value != value.quantize(CENT):
        raise ValidationError(
            "amount must have at most 2 decimal places",
            fields={"amount": "too many decimal places"},
        )

    return value.quantize(CENT)


"""
장부 기록 생성

- 협회(association_id) / 작성자(creator_id) 존재 필수 (NotFoundError)
- details는 비어 있을 수 없음
- 생성된 기록은 deleted=False, 새 UUID 부여

"""

def record_transaction(
    db: Session,
    *,
    association_id: uuid.UUID,
    creator_id: uuid.UUID,
    details: str,
    amount: Any,
    reference_date: date,
) -> Transaction:
    if not db.get(Association, association_id):
        raise NotFoundError(f"association {association_id} not found")
    if not db.get(User, creator_id):
        raise NotFoundError(f"user {creator_id} not found")

    if not isinstance(details, str) or not details.strip():
        raise ValidationError("details must not be blank", fields={"details": "blank"})
    if not isinstance(reference_date, date):
        raise ValidationError("reference_date must be a date", fields={"reference_date": "not a date"})

    transaction = Transaction(
        association_id=association_id,
        creator_id=creator_id,
        details=details,
        amount=normalize_amount(amount),
        reference_date=reference_date,
        deleted=False,
    )
    db.add(transaction)
    db.flush()
    logger.info(
        "transaction recorded",
        extra={"transaction_id": transaction.id, "association_id": association_id},
    )
    return transaction


def get_transaction(db: Session, transaction_id: uuid.UUID) -> Transaction:
    transaction = db.get(Transaction, transaction_id)
    if not transaction:
        raise NotFoundError(f"transaction {transaction_id} not found")
    return transaction


"""
장부 기록 Soft Delete

- 존재하지 않는 id면 NotFoundError
- 이미 삭제된 기록에 다시 호출해도 오류 없이 그대로 반환 (멱등)

"""

def soft_delete_transaction(db: Session, *, transaction_id: uuid.UUID) -> Transaction:
    transaction = get_transaction(db, transaction_id)
    if transaction.deleted:
        return transaction

    transaction.deleted = True
    db.flush()
    logger.info(
        "transaction soft-deleted",
        extra={"transaction_id": transaction.id, "association_id": transaction.association_id},
    )
    return transaction


def list_transactions(
    db: Session, association_id: uuid.UUID, *, include_deleted: bool = False
) -> list[Transaction]:
    if not db.get(Association, association_id):
        raise NotFoundError(f"association {association_id} not found")

    stmt = select(Transaction).where(Transaction.association_id == association_id)
    if not include_deleted:
        stmt = stmt.where(Transaction.deleted.is_(False))
    stmt = stmt.order_by(Transaction.reference_date.desc(), Transaction.created_at.desc())
    return list(db.scalars(stmt).all())


# 협회 잔액 = deleted=False 기록 금액의 합 (as_of 지정 시 그 날짜까지)
def association_balance(db: Session, association_id: uuid.UUID, *, as_of: date | None = None) -> Decimal:
    if not db.get(Association, association_id):
        raise NotFoundError(f"association {association_id} not found")

    stmt = (
        select(func.coalesce(func.sum(Transaction.amount), 0))
        .where(Transaction.association_id == association_id)
        .where(Transaction.deleted.is_(False))
    )
    if as_of is not None:
        stmt = stmt.where(Transaction.reference_date <= as_of)

    total = db.scalar(stmt)
    return Decimal(str(total or 0)).quantize(CENT)
