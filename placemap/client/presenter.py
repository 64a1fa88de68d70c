# placemap/client/presenter.py
import logging
from typing import Callable, List, Optional

from placemap.client.errors import ClientError


class Presenter:
    """
    화면 경계. 실제 UI 는 이 클래스를 상속해 배너/모달을 그립니다.
    기본 구현은 로그를 남기고 마지막으로 보여준 내용을 기록합니다.
    """
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('placemap.client.presenter')
        self.banner: Optional[ClientError] = None
        self.retry: Optional[Callable[[], object]] = None
        self.modals: List[ClientError] = []

    def show_banner(self, error: ClientError, retry: Optional[Callable[[], object]] = None) -> None:
        """재시도 가능한 오류 배너를 띄웁니다."""
        self.logger.info(f"배너 표시: {error.message}")
        self.banner = error
        self.retry = retry

    def show_modal(self, error: ClientError) -> None:
        self.logger.info(f"모달 표시: {error.message}")
        self.modals.append(error)

    def clear_banner(self) -> None:
        self.banner = None
        self.retry = None
