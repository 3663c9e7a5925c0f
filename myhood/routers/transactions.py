"""
transactions.py

협회 장부(Transaction) API 모음.

주요 기능:
- 장부 기록 생성 (작성자 = 요청한 사용자)
- 협회별 장부 목록 조회 (삭제된 기록 포함 여부 선택)
- 협회 잔액 조회
- 장부 기록 Soft Delete

설계 원칙:
- 조회는 협회 회원 이상
- 기록 생성 / 삭제는 협회 관리자 또는 현재 재무 담당만 가능
- 금액 검증 / 잔액 계산은 service 계층(myhood.services.transactions)에 위임

"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from myhood.core.deps import (
    get_claims,
    get_db,
    get_optional_user,
    require_association_member,
    require_ledger_writer,
    require_transaction_writer,
)
from myhood.core.errors import NotFoundError
from myhood.core.security import TokenClaims
from myhood.models.transaction import Transaction
from myhood.models.user import User
from myhood.schemas.transaction import BalanceResponse, TransactionCreate, TransactionResponse
from myhood.services import relations as relations_service
from myhood.services import transactions as transactions_service

router = APIRouter(tags=["transactions"])


@router.post(
    "/associations/{association_id}/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(
    association_id: uuid.UUID,
    body: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_ledger_writer),
):
    try:
        transaction = transactions_service.record_transaction(
            db,
            association_id=association_id,
            creator_id=current_user.id,
            details=body.details,
            amount=body.amount,
            reference_date=body.reference_date,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except Exception:
        db.rollback()
        raise


@router.get("/associations/{association_id}/transactions", response_model=list[TransactionResponse])
def list_transactions(
    association_id: uuid.UUID,
    include_deleted: bool = Query(default=False),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_member),
):
    return transactions_service.list_transactions(db, association_id, include_deleted=include_deleted)


@router.get("/associations/{association_id}/balance", response_model=BalanceResponse)
def read_balance(
    association_id: uuid.UUID,
    as_of: date | None = Query(default=None, description="예: 2024-12-31"),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_association_member),
):
    balance = transactions_service.association_balance(db, association_id, as_of=as_of)
    return BalanceResponse(association_id=association_id, as_of=as_of, balance=balance)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def read_transaction(
    transaction_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
    claims: TokenClaims = Depends(get_claims),
):
    transaction = transactions_service.get_transaction(db, transaction_id)
    # 소유 협회 회원만 조회 가능 (존재 여부 노출 방지를 위해 404로 통일)
    if claims.is_global_admin:
        return transaction
    if current_user is None or not relations_service.is_member(
        db, user_id=current_user.id, association_id=transaction.association_id
    ):
        raise NotFoundError(f"transaction {transaction_id} not found")
    return transaction


@router.delete("/transactions/{transaction_id}", response_model=TransactionResponse)
def delete_transaction(
    transaction_id: uuid.UUID,
    db: Session = Depends(get_db),
    transaction: Transaction = Depends(require_transaction_writer),
):
    try:
        transaction = transactions_service.soft_delete_transaction(db, transaction_id=transaction.id)
        db.commit()
        db.refresh(transaction)
        return transaction
    except Exception:
        db.rollback()
        raise
