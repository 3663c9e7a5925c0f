"""
observability.py

애플리케이션 로깅 설정 파일.

- 운영 환경: 한 줄 JSON 로그 (수집기에서 파싱하기 쉽도록)
- 로컬 개발: 사람이 읽기 쉬운 텍스트 로그

setup_logging()은 앱 시작 시 한 번만 호출한다 (myhood.main).
각 모듈은 logging.getLogger(__name__) 으로 로거를 얻어 사용한다.

"""

import json
import logging
from datetime import datetime, timezone

# 로그 레코드에 extra=로 전달될 수 있는 필드
_EXTRA_KEYS = ("user_id", "association_id", "transaction_id", "error_code", "path")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = str(val)
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))

    root = logging.getLogger()
    # 재호출(테스트의 앱 재시작 등) 시 핸들러 중복 방지
    for existing in list(root.handlers):
        if getattr(existing, "_myhood_handler", False):
            root.removeHandler(existing)
    handler._myhood_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
