import json
import os
from pathlib import Path

from dotenv import load_dotenv

from .utils import ConfigurationError, get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_local_env(root: Path = PROJECT_ROOT) -> None:
    """로컬 실행 시 .env 및 data/secrets.json 을 환경변수로 로드."""
    # Vercel 환경에서는 이미 환경변수가 주입되어 있음.
    if os.getenv("VERCEL") == "1" or "NOW_REGION" in os.environ:
        return

    for cand in [root / ".env", root / ".env.local"]:
        if cand.exists():
            load_dotenv(dotenv_path=str(cand))

    secrets_path = root / "data" / "secrets.json"
    if not secrets_path.exists():
        return
    try:
        data = json.loads(secrets_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read {secrets_path}: {e}")
        return
    if not isinstance(data, dict):
        return
    for k, v in data.items():
        if not os.getenv(k) and isinstance(v, str):
            os.environ[k] = v


# 초기화 시 환경 로드
load_local_env()


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_number(name: str, default, cast=float):
    """숫자 환경변수. 잘못된 값이면 경고 후 기본값 (import 실패 방지)."""
    raw = _env(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default


class Config:
    # NOWPayments API 주소
    NOWPAYMENTS_BASE_URL = _env("NOWPAYMENTS_BASE_URL", "https://api.nowpayments.io").rstrip("/")
    # Stripe API 주소
    STRIPE_API_BASE = _env("STRIPE_API_BASE", "https://api.stripe.com").rstrip("/")
    # Stripe-Version 헤더 (비어 있으면 계정 기본 버전)
    STRIPE_API_VERSION = _env("STRIPE_API_VERSION")
    # Origin/Referer 헤더가 모두 없을 때 사용하는 사이트 주소
    SITE_URL = _env("SITE_URL", "https://weselliphones.com")
    # 결제사 호출 타임아웃 (초)
    HTTP_TIMEOUT_SECONDS = _env_number("PAYMENT_HTTP_TIMEOUT_SECONDS", 20.0, float)
    # 로컬 개발 서버 포트
    DEV_SERVER_PORT = _env_number("DEV_SERVER_PORT", 5000, int)

    # 자격 증명은 요청 시점에 읽는다 (배포 후 env 교체 반영)
    @classmethod
    def require(cls, name: str) -> str:
        """환경변수 값을 반환하고, 없으면 ConfigurationError."""
        value = _env(name)
        if not value:
            raise ConfigurationError(f"{name} is not configured", stage="Config")
        return value

    @classmethod
    def is_development(cls) -> bool:
        env = _env("APP_ENV") or _env("VERCEL_ENV")
        return env.lower() == "development"
