"""
users.py

회원(User) API 모음.

주요 기능:
- 전역 관리자의 회원 직접 등록
- 로그인한 사용자의 본인 회원 가입 (email은 토큰에서 가져옴)
- 회원 조회 / 부분 수정 / 삭제

설계 원칙:
- 비즈니스 로직은 service 계층(myhood.services.users)에 위임
- 수정 / 삭제는 본인 또는 전역 관리자만 가능
- 도메인 예외는 rollback 후 전역 핸들러로 전파

관련 파일:
- myhood.services.users       : 회원 검증 / 생성 / 삭제 로직
- myhood.core.deps            : 인증 의존성

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from myhood.core.deps import get_claims, get_current_user, get_db, get_user_or_global_admin, require_global_admin
from myhood.core.errors import ConflictError
from myhood.core.security import TokenClaims
from myhood.models.user import User
from myhood.schemas.user import OwnUserCreate, UserCreate, UserResponse, UserUpdate
from myhood.services import users as users_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    _: TokenClaims = Depends(require_global_admin),
):
    try:
        user = users_service.create_user(db, body)
        db.commit()
        db.refresh(user)
        return user
    except Exception:
        db.rollback()
        raise


"""
본인 회원 가입 API

- 아직 회원 레코드가 없는 로그인 사용자(토큰에 email만 존재)가 호출
- email은 요청 본문이 아닌 토큰 클레임에서 가져옴
- 이미 같은 email의 회원이 있으면 409

"""
@router.post("/me", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_own_user(
    body: OwnUserCreate,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_claims),
):
    if not claims.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token carries no email")
    if claims.sub:
        raise ConflictError("token is already bound to a user")

    try:
        data = users_service.validate_user({**body.model_dump(), "email": claims.email})
        user = users_service.create_user(db, data)
        db.commit()
        db.refresh(user)
        return user
    except Exception:
        db.rollback()
        raise


@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    _: User | None = Depends(get_user_or_global_admin),
):
    return users_service.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
def read_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User | None = Depends(get_user_or_global_admin),
):
    return users_service.get_user(db, user_id)


def _ensure_self_or_global_admin(user_id: uuid.UUID, current_user: User | None, claims: TokenClaims) -> None:
    if claims.is_global_admin:
        return
    if current_user is None or current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Can only modify your own profile")


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_user_or_global_admin),
    claims: TokenClaims = Depends(get_claims),
):
    _ensure_self_or_global_admin(user_id, current_user, claims)
    try:
        user = users_service.update_user(db, user_id=user_id, data=body)
        db.commit()
        db.refresh(user)
        return user
    except Exception:
        db.rollback()
        raise


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_user_or_global_admin),
    claims: TokenClaims = Depends(get_claims),
):
    _ensure_self_or_global_admin(user_id, current_user, claims)
    try:
        users_service.delete_user(db, user_id=user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)
