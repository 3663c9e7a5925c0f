"""

운영자용 액세스 토큰 발급 스크립트.

- 로그인(외부 OAuth)을 거치지 않고 토큰이 필요한 경우 사용
  (초기 세팅 시 전역 관리자 토큰, 장애 대응 등)
- .env의 SECRET_KEY로 서명하므로 서버와 같은 .env를 사용해야 한다.

사용 방법
- 가상환경 접속
- 전역 관리자 토큰:
  (.venv) ~\backend~$ python -m scripts.issue_token --global-admin --email admin@example.com
- 기존 회원 토큰 (email로 회원 조회):
  (.venv) ~\backend~$ python -m scripts.issue_token --email member@example.com

"""

import argparse
from datetime import timedelta

from dotenv import load_dotenv
load_dotenv()

from myhood.core.security import GLOBAL_ADMIN, create_access_token
from myhood.db.session import SessionLocal
from myhood.services.users import get_user_by_email


def main(argv=None):
    parser = argparse.ArgumentParser(description="Issue a My Hood access token")
    parser.add_argument("--email", required=True)
    parser.add_argument("--global-admin", action="store_true")
    parser.add_argument("--minutes", type=int, default=60)
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = get_user_by_email(db, args.email)
    finally:
        db.close()

    if user is None and not args.global_admin:
        raise SystemExit(f"No user registered with email {args.email}")

    token = create_access_token(
        str(user.id) if user else None,
        email=args.email,
        roles=[GLOBAL_ADMIN] if args.global_admin else [],
        expires_delta=timedelta(minutes=args.minutes),
    )
    print(token)


if __name__ == "__main__":
    main()
