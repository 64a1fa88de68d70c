# placemap/client/context.py
import logging
import threading
from typing import Callable, Dict, List, Optional

from placemap.client.config import ClientConfig
from placemap.client.errors import AuthRequired
from placemap.client.presenter import Presenter


class ClientContext:
    """
    클라이언트 세션 객체.
    설정, 로거, Presenter, 인증 토큰을 한곳에 모아 각 컴포넌트에 명시적으로 전달합니다.

    - start(token, user_id): 인증 세션 시작
    - logout(): 토큰 제거 후 등록된 정리 콜백 실행 (여러 번 호출해도 안전)
    - generation: 세션이 바뀔 때마다 증가. 진행 중이던 요청의 결과를 버릴지 판단하는 데 씁니다.
    """
    def __init__(self, config: Optional[ClientConfig] = None, presenter: Optional[Presenter] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or ClientConfig()
        self.logger = logger or logging.getLogger('placemap.client')
        self.presenter = presenter or Presenter(self.logger.getChild('presenter'))
        self.token: Optional[str] = None
        self.user_id: Optional[str] = None
        self.generation = 0
        self._teardown: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def start(self, token: str, user_id: str) -> None:
        if not token:
            raise ValueError("token 은 비어 있을 수 없습니다.")
        with self._lock:
            self.token = token
            self.user_id = user_id
            self.generation += 1
        self.logger.info(f"세션 시작 (user_id: {user_id})")

    def logout(self) -> None:
        with self._lock:
            if not self.token:
                return
            self.token = None
            self.user_id = None
            self.generation += 1
            callbacks = list(self._teardown)

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                self.logger.error(f"로그아웃 정리 작업 실패: {e}", exc_info=True)
        self.logger.info("세션 종료")

    def on_logout(self, callback: Callable[[], None]) -> None:
        """로그아웃 시 실행할 정리 콜백을 등록합니다."""
        self._teardown.append(callback)

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            raise AuthRequired()
        return {"Authorization": f"Bearer {self.token}"}
