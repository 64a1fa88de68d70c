# placemap/client/config.py
import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class ClientConfig:
    """클라이언트 세션 설정. ClientContext 를 통해서만 전달됩니다."""
    api_base_url: str = 'http://127.0.0.1:5000/api/v1'
    post_fetch_timeout: float = 10.0        # 게시글 목록 요청에만 적용하는 클라이언트 타임아웃(초)
    post_refresh_interval: float = 120.0
    notification_poll_interval: float = 30.0
    notification_window: int = 5           # 메모리에 유지하는 최근 알림 개수
    geocoder_base_url: str = 'https://nominatim.openstreetmap.org'
    geocoder_timeout: float = 5.0
    geocoder_user_agent: str = 'placemap-client/1.0'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ClientConfig':
        """PLACEMAP_* 환경 변수에서 설정을 읽습니다. 없는 값은 기본값을 사용합니다."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            api_base_url=env.get('PLACEMAP_API_BASE_URL', defaults.api_base_url).rstrip('/'),
            post_fetch_timeout=float(env.get('PLACEMAP_POST_FETCH_TIMEOUT', defaults.post_fetch_timeout)),
            post_refresh_interval=float(env.get('PLACEMAP_POST_REFRESH_INTERVAL', defaults.post_refresh_interval)),
            notification_poll_interval=float(
                env.get('PLACEMAP_NOTIFICATION_POLL_INTERVAL', defaults.notification_poll_interval)
            ),
            notification_window=int(env.get('PLACEMAP_NOTIFICATION_WINDOW', defaults.notification_window)),
            geocoder_base_url=env.get('PLACEMAP_GEOCODER_BASE_URL', defaults.geocoder_base_url).rstrip('/'),
            geocoder_timeout=float(env.get('PLACEMAP_GEOCODER_TIMEOUT', defaults.geocoder_timeout)),
            geocoder_user_agent=env.get('PLACEMAP_GEOCODER_USER_AGENT', defaults.geocoder_user_agent),
        )
