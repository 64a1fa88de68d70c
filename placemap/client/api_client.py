# placemap/client/api_client.py
from typing import Any, Dict, Optional

import requests

from placemap.client.context import ClientContext
from placemap.client.errors import (
    AuthRequired, RateLimited, NetworkTimeout, NetworkFailure, ServerRejected
)


class ApiClient:
    """
    REST API(/api/v1) 호출용 requests.Session 래퍼.
    전송 계층의 실패와 2xx 가 아닌 응답을 ClientError 계층으로 변환합니다.
    timeout 을 넘긴 호출만 클라이언트 타임아웃이 적용됩니다.
    """
    def __init__(self, context: ClientContext, session: Optional[requests.Session] = None):
        self.context = context
        self.session = session or requests.Session()
        self.logger = context.logger.getChild('api')

    def request(self, method: str, path: str, *, auth: bool = False, json: Any = None,
                params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Any:
        headers = self.context.auth_headers() if auth else {}
        url = f"{self.context.config.api_base_url}{path}"

        try:
            response = self.session.request(method, url, json=json, params=params,
                                            headers=headers, timeout=timeout)
        except requests.Timeout as e:
            raise NetworkTimeout() from e
        except requests.ConnectionError as e:
            raise NetworkFailure() from e

        if response.status_code == 429:
            raise RateLimited()
        if response.status_code == 401:
            raise AuthRequired()
        if not response.ok:
            payload = self._json_or_none(response)
            message, error_code = None, None
            if isinstance(payload, dict):
                message = payload.get('message') or payload.get('msg')
                error_code = payload.get('error_code')
            self.logger.warning(f"{method} {path} 실패 ({response.status_code}): {message}")
            raise ServerRejected(response.status_code, message, error_code)

        if response.status_code == 204 or not response.content:
            return None
        payload = self._json_or_none(response)
        if payload is None:
            raise ServerRejected(response.status_code, "응답을 해석할 수 없습니다.")
        return payload

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request('POST', path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request('PATCH', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)
