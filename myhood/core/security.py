"""
security.py

JWT 액세스 토큰 생성/검증을 담당하는 보안 유틸리티 모음.

로그인 자체(외부 OAuth 제공자)는 이 서비스의 범위 밖이며,
이 파일은 동일한 시크릿으로 서명된 토큰을 발급/검증하는
저수준(low-level) 기능만 제공한다.

토큰 클레임:
- sub   : 사용자 식별자(user_id). 아직 회원 레코드가 없는 경우 생략 가능
- email : 로그인한 이메일
- roles : 전역 권한 목록 (예: ["GLOBAL_ADMIN"])
- type  : 항상 "access"
- exp   : 만료 시각 (UTC timestamp)

관련 파일:
- myhood.core.config        : JWT 시크릿 키 및 만료 설정
- myhood.core.deps          : 토큰을 실제로 검증하는 인증 의존성
- scripts.issue_token       : 운영자용 토큰 발급 스크립트

"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from jose import jwt, JWTError

from myhood.core.config import settings


GLOBAL_ADMIN = "GLOBAL_ADMIN"


@dataclass(frozen=True)
class TokenClaims:
    sub: Optional[str]
    email: Optional[str]
    roles: list[str] = field(default_factory=list)

    @property
    def is_global_admin(self) -> bool:
        return GLOBAL_ADMIN in self.roles


def create_access_token(
    subject: Optional[str] = None,
    *,
    email: Optional[str] = None,
    roles: Sequence[str] = (),
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "type": "access",
        "roles": list(roles),
        "exp": int(expire.timestamp()),
    }
    if subject:
        payload["sub"] = subject
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


"""
Access Token 디코딩 및 검증 함수

- 서명 / 만료(exp) 검증은 jose가 수행
- type이 access가 아니면 거부
- sub와 email이 모두 없는 토큰은 누구인지 알 수 없으므로 거부
- 유효하지 않을 경우 JWTError 발생

"""

def decode_access_token(token: str) -> TokenClaims:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Not an access token")

    sub = payload.get("sub")
    email = payload.get("email")
    if not sub and not email:
        raise JWTError("Token carries no identity")

    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        raise JWTError("Malformed roles claim")

    return TokenClaims(sub=sub, email=email, roles=[str(r) for r in roles])
