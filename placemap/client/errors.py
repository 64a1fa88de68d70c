# placemap/client/errors.py
"""
클라이언트 동기화 계층의 예외 계층

HTTP 계층(ApiClient)에서 발생시키고, 컴포넌트 경계(PostStore, FavoriteTracker,
NotificationFeed)에서 잡아 Presenter 호출(배너/모달)로 바꿉니다.
컴포넌트 경계를 넘어 다시 던지지 않습니다.
"""
from typing import Any, Dict, Optional


class ClientError(Exception):
    """모든 클라이언트 오류의 기반 클래스"""
    default_message = "요청을 처리하지 못했습니다."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthRequired(ClientError):
    """로그인이 필요한 동작. 예외가 아닌 모달로 안내합니다."""
    default_message = "로그인이 필요합니다."


class RateLimited(ClientError):
    """HTTP 429. 화면에 노출하지 않고 로그만 남깁니다."""
    default_message = "요청이 너무 많습니다."


class NetworkTimeout(ClientError):
    """클라이언트 타임아웃. 재시도 배너로 안내합니다."""
    default_message = "서버 응답 시간이 초과되었습니다."


class NetworkFailure(ClientError):
    default_message = "서버에 연결할 수 없습니다."


class ValidationFailure(ClientError):
    """
    클라이언트 측 입력 검증 실패. 네트워크 요청 전에 발생합니다.
    errors 는 marshmallow ValidationError.messages 형식입니다.
    """
    default_message = "입력값을 확인해 주세요."

    def __init__(self, errors: Dict[str, Any], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)


class ServerRejected(ClientError):
    """2xx 가 아닌 응답. 서버가 보낸 message 를 그대로 보여줍니다."""
    default_message = "서버가 요청을 거부했습니다."

    def __init__(self, status: int, message: Optional[str] = None, error_code: Optional[str] = None):
        self.status = status
        self.error_code = error_code
        super().__init__(message)
