# placemap/client/scheduler.py
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    interval 초마다 fn 을 호출하는 백그라운드 타이머 스레드.
    fn 에서 발생한 예외는 로그로 남기고 다음 주기에 다시 실행합니다.
    """
    def __init__(self, interval: float, fn: Callable[[], object], name: str = 'periodic-task'):
        if interval <= 0:
            raise ValueError("interval 은 0보다 커야 합니다.")
        self.interval = interval
        self.fn = fn
        self.name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"{self.name} 시작 (interval: {self.interval}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.fn()
            except Exception as e:
                logger.error(f"{self.name} 실행 중 오류 발생: {e}", exc_info=True)
