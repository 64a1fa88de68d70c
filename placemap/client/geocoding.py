# placemap/client/geocoding.py
"""
OpenStreetMap Nominatim 지오코딩 클라이언트

장소 검색과 역지오코딩은 부가 기능입니다. 네트워크 오류, 비정상 응답, 해석할 수 없는
본문은 모두 '결과 없음'(검색은 빈 목록, 역지오코딩은 None)으로 처리하고 경고 로그만 남깁니다.
"""
from typing import Any, Dict, List, Optional

import requests

from placemap.client.context import ClientContext
from placemap.client.models import GeocodeResult
from placemap.client.normalize import normalize_position

SEARCH_LIMIT = 10


class Geocoder:
    def __init__(self, context: ClientContext, session: Optional[requests.Session] = None):
        self.config = context.config
        self.session = session or requests.Session()
        self.logger = context.logger.getChild('geocoding')

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            response = self.session.get(
                f"{self.config.geocoder_base_url}{path}",
                params={**params, 'format': 'json'},
                headers={'User-Agent': self.config.geocoder_user_agent},
                timeout=self.config.geocoder_timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.warning(f"지오코딩 요청 실패 ({path}): {e}")
            return None

    def search(self, query: str) -> List[GeocodeResult]:
        """장소 이름/주소로 검색합니다. 좌표가 없는 항목은 제외합니다."""
        if not query or not query.strip():
            return []
        payload = self._get('/search', {'q': query.strip(), 'limit': SEARCH_LIMIT, 'addressdetails': 1})
        if not isinstance(payload, list):
            return []
        results = []
        for item in payload:
            result = self._to_result(item)
            if result is not None:
                results.append(result)
        return results

    def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        """좌표에 해당하는 주소를 찾습니다. 찾지 못하면 None."""
        payload = self._get('/reverse', {'lat': latitude, 'lon': longitude, 'addressdetails': 1})
        if not isinstance(payload, dict) or 'error' in payload:
            return None
        return self._to_result(payload)

    @staticmethod
    def _to_result(item: Any) -> Optional[GeocodeResult]:
        if not isinstance(item, dict):
            return None
        # Nominatim 은 좌표를 문자열로 내려줍니다.
        try:
            position = normalize_position({'latitude': float(item['lat']), 'longitude': float(item['lon'])})
        except (KeyError, TypeError, ValueError):
            return None
        if position is None:
            return None
        bbox = item.get('boundingbox')
        try:
            relevance = float(item.get('importance') or 0.0)
        except (TypeError, ValueError):
            relevance = 0.0
        return GeocodeResult(
            name=item.get('display_name') or '',
            position=position,
            address=item.get('address') if isinstance(item.get('address'), dict) else {},
            type=item.get('type'),
            category=item.get('category') or item.get('class'),
            bbox=[float(v) for v in bbox] if isinstance(bbox, list) and len(bbox) == 4 else None,
            relevance=relevance,
        )
