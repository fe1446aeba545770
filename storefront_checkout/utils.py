import logging
import os

# 로그 파일 경로 (serverless 환경은 파일시스템이 읽기 전용이라 기본값은 stream 전용)
LOG_FILE = os.getenv("LOG_FILE", "").strip()

_handlers = [logging.StreamHandler()]
if LOG_FILE:
    os.makedirs(os.path.dirname(os.path.abspath(LOG_FILE)), exist_ok=True)
    _handlers.append(logging.FileHandler(LOG_FILE, encoding="utf-8"))

# 로거 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=_handlers,
)


def get_logger(name):
    """이름을 기준으로 로거 인스턴스를 반환합니다."""
    return logging.getLogger(name)


# 공통 로거 인스턴스
logger = get_logger(__name__)


class CheckoutError(Exception):
    """체크아웃 처리 중 클라이언트에게 돌려줄 수 있는 오류."""

    status = 500
    log_level = logging.WARNING

    def __init__(
        self, message, stage="Unknown", order_ref=None, original_exception=None
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.order_ref = order_ref
        self.original_exception = original_exception
        logger.log(
            self.log_level,
            f"[{type(self).__name__}] Stage: {self.stage}, Order: {self.order_ref}, Message: {self.message}"
        )


class FormDataError(CheckoutError):
    """요청 form 데이터가 누락되었거나 잘못된 경우 (400)."""

    status = 400


class ConfigurationError(CheckoutError):
    """결제사 자격 증명 등 서버 설정이 빠진 경우 (500)."""

    status = 500
    log_level = logging.ERROR
