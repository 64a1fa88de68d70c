# placemap/client/favorites.py
import threading
from typing import Set

from placemap.client.api_client import ApiClient
from placemap.client.context import ClientContext
from placemap.client.errors import AuthRequired, ClientError, ServerRejected
from placemap.client.models import Post
from placemap.client.mutation import Mutation
from placemap.client.post_store import PostStore

# 현재 북마크 여부 -> 서버가 '이미 목표 상태'라고 알려주는 error_code
TARGET_STATE_CODES = {False: 'ALREADY_FAVORITED', True: 'NOT_FAVORITED'}


class FavoriteTracker:
    """
    현재 사용자가 즐겨찾기한 게시글 id 집합을 관리합니다.
    집합이 바뀔 때마다 PostStore 의 모든 게시글에 bookmarked 를 다시 찍습니다.
    로그아웃 시 로컬 캐시만 비웁니다. (서버의 즐겨찾기는 유지)
    """
    def __init__(self, context: ClientContext, api: ApiClient, store: PostStore):
        self.context = context
        self.api = api
        self.store = store
        self.logger = context.logger.getChild('favorites')
        self.ids: Set[str] = set()
        self._fetch_lock = threading.Lock()
        context.on_logout(self.clear)

    def is_bookmarked(self, post_id: str) -> bool:
        return post_id in self.ids

    def fetch(self) -> bool:
        """서버의 즐겨찾기 목록으로 로컬 집합을 교체합니다. 비로그인 상태에서는 건너뜁니다."""
        if not self.context.is_authenticated:
            return False
        if not self._fetch_lock.acquire(blocking=False):
            return False
        try:
            generation = self.context.generation
            try:
                payload = self.api.get('/users/favorites', auth=True)
            except ClientError as e:
                self.logger.error(f"즐겨찾기 목록 조회 실패: {e.message}")
                return False
            if not self.context.is_current(generation):
                return False
            self.ids = {str(post_id) for post_id in (payload or {}).get('favorites', [])}
            self.store.stamp_bookmarks(self.ids)
            return True
        finally:
            self._fetch_lock.release()

    def toggle(self, post: Post) -> Mutation:
        """
        즐겨찾기를 추가하거나 제거합니다.
        실패하면 오류 모달을 띄우고 로컬 상태는 바꾸지 않습니다.
        서버가 ALREADY_FAVORITED / NOT_FAVORITED 로 답하면 이미 목표 상태이므로 성공으로 확정합니다.
        """
        mutation = Mutation('toggle_favorite', post.id)
        if not self.context.is_authenticated:
            error = AuthRequired()
            self.context.presenter.show_modal(error)
            return mutation.roll_back(error)

        generation = self.context.generation
        bookmarked = post.id in self.ids
        try:
            if bookmarked:
                self.api.delete(f'/users/favorites/{post.id}', auth=True)
            else:
                self.api.post('/users/favorites', json={'post_id': post.id}, auth=True)
        except ServerRejected as e:
            if e.error_code != TARGET_STATE_CODES[bookmarked]:
                return self._reject(mutation, e)
            # 서버가 이미 목표 상태임. 로컬 집합이 오래된 경우입니다.
            self.logger.info(f"즐겨찾기 상태를 서버 기준으로 맞춥니다 (post_id: {post.id}, {e.error_code})")
        except ClientError as e:
            return self._reject(mutation, e)

        if not self.context.is_current(generation):
            # 요청 도중 로그아웃됨. 비워진 캐시를 다시 채우지 않습니다.
            return mutation.roll_back(AuthRequired())

        if bookmarked:
            self.ids.discard(post.id)
        else:
            self.ids.add(post.id)
        self.store.stamp_bookmarks(self.ids)
        post.bookmarked = post.id in self.ids
        return mutation.confirm()

    def _reject(self, mutation: Mutation, error: ClientError) -> Mutation:
        self.logger.error(f"즐겨찾기 변경 실패 (post_id: {mutation.target}): {error.message}")
        self.context.presenter.show_modal(error)
        return mutation.roll_back(error)

    def clear(self) -> None:
        self.ids = set()
        self.store.stamp_bookmarks(self.ids)
