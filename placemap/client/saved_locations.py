# placemap/client/saved_locations.py
import threading
from typing import Any, Dict, List, Optional

from placemap.client.api_client import ApiClient
from placemap.client.context import ClientContext
from placemap.client.errors import AuthRequired, ClientError
from placemap.client.models import Post, SavedLocation
from placemap.client.mutation import Mutation
from placemap.client.normalize import normalize_saved_locations

SAVED_LOCATIONS_PATH = '/users/saved-locations'


class SavedLocationTracker:
    """
    현재 사용자가 저장한 장소 목록(최근 저장순)을 관리합니다.
    서버는 추가/삭제 후의 전체 목록을 돌려주므로 응답으로 로컬 목록을 통째로 교체합니다.
    로그아웃 시 로컬 목록만 비웁니다.
    """
    def __init__(self, context: ClientContext, api: ApiClient):
        self.context = context
        self.api = api
        self.logger = context.logger.getChild('saved_locations')
        self.locations: List[SavedLocation] = []
        self._fetch_lock = threading.Lock()
        context.on_logout(self.clear)

    def is_saved(self, location_id: str) -> bool:
        return any(location.id == location_id for location in self.locations)

    def fetch(self) -> bool:
        if not self.context.is_authenticated:
            return False
        if not self._fetch_lock.acquire(blocking=False):
            return False
        try:
            generation = self.context.generation
            try:
                payload = self.api.get(SAVED_LOCATIONS_PATH, auth=True)
            except ClientError as e:
                self.logger.error(f"저장 장소 목록 조회 실패: {e.message}")
                return False
            return self._replace(payload, generation)
        finally:
            self._fetch_lock.release()

    def add(self, location: Dict[str, Any]) -> Mutation:
        """
        location 은 {location_id, name, latitude, longitude, ...} 형식입니다.
        이미 저장된 장소(409)는 실패로 보고 모달을 띄웁니다.
        """
        mutation = Mutation('save_location', location.get('location_id'))
        return self._send(mutation, 'POST', SAVED_LOCATIONS_PATH, json=location)

    def add_post(self, post: Post) -> Mutation:
        """게시글 위치를 저장 장소로 추가합니다."""
        lat, lng = post.position
        return self.add({
            'location_id': post.id, 'name': post.title, 'latitude': lat, 'longitude': lng,
            'category': post.category, 'description': post.description or None,
        })

    def remove(self, location_id: str) -> Mutation:
        mutation = Mutation('remove_saved_location', location_id)
        return self._send(mutation, 'DELETE', f'{SAVED_LOCATIONS_PATH}/{location_id}')

    def _send(self, mutation: Mutation, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Mutation:
        if not self.context.is_authenticated:
            error = AuthRequired()
            self.context.presenter.show_modal(error)
            return mutation.roll_back(error)

        generation = self.context.generation
        try:
            payload = self.api.request(method, path, json=json, auth=True)
        except ClientError as e:
            self.logger.error(f"저장 장소 변경 실패 ({mutation.target}): {e.message}")
            self.context.presenter.show_modal(e)
            return mutation.roll_back(e)

        if not self._replace(payload, generation):
            return mutation.roll_back(AuthRequired())
        return mutation.confirm()

    def _replace(self, payload: Any, generation: int) -> bool:
        if not self.context.is_current(generation):
            return False
        self.locations = normalize_saved_locations((payload or {}).get('saved_locations', []))
        return True

    def clear(self) -> None:
        self.locations = []
