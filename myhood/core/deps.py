from datetime import date, datetime
from typing import Generator
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from myhood.core.security import TokenClaims, decode_access_token
from myhood.db.base import utcnow
from myhood.db.session import SessionLocal
from myhood.models.field import Field, FieldReservation
from myhood.models.transaction import Transaction
from myhood.models.user import User
from myhood.services import fields as fields_service
from myhood.services import relations as relations_service
from myhood.services.transactions import get_transaction

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_claims(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    if cred is None:
        raise _unauthorized("Not authenticated")
    try:
        return decode_access_token(cred.credentials)
    except JWTError:
        raise _unauthorized("Could not validate credentials")


# sub가 없는 토큰(전역 관리자, 가입 전 사용자)은 None
# sub가 있으면 해당 회원이 실제로 존재해야 함
def get_optional_user(
    claims: TokenClaims = Depends(get_claims),
    db: Session = Depends(get_db),
) -> User | None:
    if not claims.sub:
        return None
    try:
        user_id = uuid.UUID(claims.sub)
    except ValueError:
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise _unauthorized("Token is not bound to a user")
    return user


# 회원이거나 전역 관리자이면 통과 (전역 관리자는 회원 레코드가 없을 수 있음)
def get_user_or_global_admin(
    claims: TokenClaims = Depends(get_claims),
    user: User | None = Depends(get_optional_user),
) -> User | None:
    if user is None and not claims.is_global_admin:
        raise _unauthorized("Token is not bound to a user")
    return user


def require_global_admin(claims: TokenClaims = Depends(get_claims)) -> TokenClaims:
    if not claims.is_global_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Requires global admin")
    return claims


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# 현재 시각 (테스트에서 dependency_overrides로 고정 가능)
def get_now() -> datetime:
    return utcnow()


"""
협회 단위 권한 의존성

- 전역 관리자(GLOBAL_ADMIN) 토큰은 모든 협회 권한 검사를 통과
  (sub 없는 전역 관리자 토큰이면 None 반환)
- 그 외에는 회원 레코드가 있는 토큰이어야 함 (없으면 401)
- association_id는 경로 파라미터에서 주입됨

"""

def _check_member(db: Session, claims: TokenClaims, user: User | None, association_id: uuid.UUID) -> User | None:
    if claims.is_global_admin:
        return user
    if user is None:
        raise _unauthorized("Token is not bound to a user")
    if not relations_service.is_member(db, user_id=user.id, association_id=association_id):
        raise _forbidden("Requires association membership")
    return user


def _check_admin(db: Session, claims: TokenClaims, user: User | None, association_id: uuid.UUID) -> User | None:
    if claims.is_global_admin:
        return user
    if user is None:
        raise _unauthorized("Token is not bound to a user")
    if not relations_service.is_admin(db, user_id=user.id, association_id=association_id):
        raise _forbidden("Requires association admin")
    return user


def require_association_member(
    association_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> User | None:
    return _check_member(db, claims, current_user, association_id)


def require_association_admin(
    association_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> User | None:
    return _check_admin(db, claims, current_user, association_id)


def _can_write_ledger(db: Session, claims: TokenClaims, user: User | None, association_id: uuid.UUID) -> bool:
    if claims.is_global_admin:
        return True
    if user is None:
        raise _unauthorized("Token is not bound to a user")
    return (
        relations_service.is_admin(db, user_id=user.id, association_id=association_id)
        or relations_service.is_treasurer(db, user_id=user.id, association_id=association_id, on=date.today())
    )


# 장부 기록: 관리자 또는 현재 재무 담당만 가능
# 작성자(creator_id)가 필요하므로 회원 레코드가 있는 토큰이어야 함
def require_ledger_writer(
    association_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    if not _can_write_ledger(db, claims, current_user, association_id):
        raise _forbidden("Requires association admin or treasurer")
    return current_user


# /transactions/{transaction_id} 경로용: 기록의 소유 협회 기준으로 판단
def require_transaction_writer(
    transaction_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> Transaction:
    transaction = get_transaction(db, transaction_id)
    if not _can_write_ledger(db, claims, current_user, transaction.association_id):
        raise _forbidden("Requires association admin or treasurer")
    return transaction


# /fields/{field_id} 경로용: 장소의 소유 협회 기준으로 판단
def require_field_member(
    field_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> Field:
    field = fields_service.get_field(db, field_id)
    _check_member(db, claims, current_user, field.association_id)
    return field


def require_field_admin(
    field_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> Field:
    field = fields_service.get_field(db, field_id)
    _check_admin(db, claims, current_user, field.association_id)
    return field


# 예약 취소: 예약한 본인, 협회 관리자, 전역 관리자
def require_reservation_canceller(
    reservation_id: uuid.UUID,
    claims: TokenClaims = Depends(get_claims),
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> FieldReservation:
    reservation = fields_service.get_reservation(db, reservation_id)
    if claims.is_global_admin:
        return reservation
    if current_user is None:
        raise _unauthorized("Token is not bound to a user")
    if reservation.user_id == current_user.id:
        return reservation

    field = fields_service.get_field(db, reservation.field_id)
    if not relations_service.is_admin(db, user_id=current_user.id, association_id=field.association_id):
        raise _forbidden("Only the reserving member or an association admin can cancel")
    return reservation
