# placemap/client/post_store.py
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set

from marshmallow import ValidationError

from placemap.api.posts.schemas import PostCreateSchema, RatingCreateSchema
from placemap.client.api_client import ApiClient
from placemap.client.context import ClientContext
from placemap.client.errors import AuthRequired, ClientError, RateLimited, ValidationFailure
from placemap.client.filters import FilterState, apply_filters
from placemap.client.models import Post
from placemap.client.mutation import Mutation
from placemap.client.normalize import normalize_post, normalize_posts
from placemap.client.scheduler import PeriodicTask

# 주기적 새로고침 시 선택된 게시글에 덮어쓰는 필드
VOLATILE_FIELDS = ('average_rating', 'total_ratings', 'likes', 'likes_count')
# apply_remote_update 로 갱신할 수 있는 필드
MERGEABLE_FIELDS = VOLATILE_FIELDS + (
    'title', 'description', 'category', 'images', 'comments', 'price', 'tags'
)


class PostStore:
    """
    세션 동안의 게시글 목록(posts)과 화면에 보이는 목록(visible), 선택된 게시글을 관리합니다.

    - fetch 는 동시에 하나만 실행됩니다. 이미 진행 중이면 즉시 False 를 반환합니다.
    - 같은 id 의 게시글은 객체를 교체하지 않고 필드만 갱신합니다 (마지막 응답 우선).
    - bookmarked 는 FavoriteTracker 가 넘겨준 id 집합에서 파생됩니다.
    """
    def __init__(self, context: ClientContext, api: ApiClient):
        self.context = context
        self.api = api
        self.logger = context.logger.getChild('posts')
        self.posts: List[Post] = []
        self.visible: List[Post] = []
        self.selected: Optional[Post] = None
        self.error: Optional[ClientError] = None
        self.filters = FilterState()
        self._bookmarked_ids: Set[str] = set()
        self._fetch_lock = threading.Lock()
        self._state_lock = threading.RLock()
        self._refresh_task = PeriodicTask(
            context.config.post_refresh_interval,
            lambda: self.fetch(preserve_selection=True),
            name='post-refresh'
        )

    # ---------------------------------------------------------------- 조회
    def fetch(self, preserve_selection: bool = False, limit: Optional[int] = None) -> bool:
        """
        게시글 목록을 다시 불러와 전체 목록을 교체합니다.
        - 429: 로그만 남기고 목록과 error 는 그대로 둡니다.
        - 그 밖의 실패: error 를 설정하고, 기존 목록을 유지한 채 재시도 배너를 요청합니다.
        """
        if not self._fetch_lock.acquire(blocking=False):
            self.logger.debug("게시글 조회가 이미 진행 중입니다.")
            return False
        try:
            generation = self.context.generation
            params = {'limit': limit} if limit else None
            try:
                payload = self.api.get('/posts', params=params,
                                       timeout=self.context.config.post_fetch_timeout)
            except RateLimited:
                self.logger.warning("게시글 조회가 rate limit 에 걸렸습니다. 다음 주기에 다시 시도합니다.")
                return False
            except ClientError as e:
                if not self.context.is_current(generation):
                    return False
                self.logger.error(f"게시글 조회 실패: {e.message}")
                self.error = e
                self.context.presenter.show_banner(e, retry=lambda: self.fetch(preserve_selection=True))
                return False

            if not self.context.is_current(generation):
                self.logger.debug("세션이 바뀌어 게시글 조회 결과를 버립니다.")
                return False

            raw_posts = payload.get('posts', []) if isinstance(payload, dict) else payload
            self._replace_all(normalize_posts(raw_posts), preserve_selection)
            if self.error is not None:
                self.error = None
                self.context.presenter.clear_banner()
            return True
        finally:
            self._fetch_lock.release()

    def _replace_all(self, fresh: List[Post], preserve_selection: bool) -> None:
        with self._state_lock:
            if self.selected is not None:
                for index, post in enumerate(fresh):
                    if post.id != self.selected.id:
                        continue
                    if preserve_selection:
                        # 상세 화면에 로드된 객체를 유지하고 변하는 필드만 덮어씁니다.
                        self._merge(self.selected, {name: getattr(post, name) for name in VOLATILE_FIELDS})
                        fresh[index] = self.selected
                    else:
                        self.selected = post
                    break
            self.posts = fresh
            self._stamp(self.posts)
            self._refilter()

    # ---------------------------------------------------------------- 선택
    def select(self, post_id: str) -> Optional[Post]:
        with self._state_lock:
            self.selected = self.find(post_id)
            return self.selected

    def clear_selection(self) -> None:
        self.selected = None

    def find(self, post_id: str) -> Optional[Post]:
        return next((post for post in self.posts if post.id == post_id), None)

    # ---------------------------------------------------------------- 필터
    def set_filters(self, **changes) -> List[Post]:
        with self._state_lock:
            self.filters = replace(self.filters, **changes)
            self._refilter()
            return self.visible

    def _refilter(self) -> None:
        self.visible = apply_filters(self.posts, self.filters)

    # ---------------------------------------------------------------- 북마크
    def stamp_bookmarks(self, bookmarked_ids: Set[str]) -> None:
        """전체 목록과 보이는 목록의 모든 게시글에 bookmarked 를 다시 찍습니다."""
        with self._state_lock:
            self._bookmarked_ids = set(bookmarked_ids)
            self._stamp(self.posts)
            self._stamp(self.visible)
            if self.selected is not None:
                self._stamp([self.selected])

    def _stamp(self, posts: List[Post]) -> None:
        for post in posts:
            post.bookmarked = post.id in self._bookmarked_ids

    # ---------------------------------------------------------------- 변경
    def create_post(self, payload: Dict[str, Any]) -> Mutation:
        """
        게시글을 생성하고, 서버가 돌려준 표현을 목록에 반영합니다.
        입력 검증 실패는 네트워크 요청 없이 ValidationFailure 로 끝납니다.
        """
        mutation = Mutation('create_post')
        try:
            data = PostCreateSchema().load(payload)
        except ValidationError as err:
            return mutation.roll_back(ValidationFailure(err.messages))

        if not self.context.is_authenticated:
            return self._require_auth(mutation)

        generation = self.context.generation
        try:
            created = self.api.post('/posts', json=data, auth=True)
        except ClientError as e:
            self.logger.error(f"게시글 생성 실패: {e.message}")
            self.context.presenter.show_modal(e)
            return mutation.roll_back(e)

        post = normalize_post(created)
        if post is None:
            self.logger.warning(f"생성된 게시글을 목록에 반영할 수 없습니다: {created!r}")
            return mutation.confirm()
        mutation.target = post.id
        if not self.context.is_current(generation):
            return mutation.confirm()

        with self._state_lock:
            existing = self.find(post.id)
            if existing is not None:
                self._merge(existing, {name: getattr(post, name) for name in MERGEABLE_FIELDS})
            else:
                self.posts.append(post)
            self._stamp(self.posts)
            self._refilter()
        return mutation.confirm()

    def apply_remote_update(self, post_id: str, changes: Dict[str, Any]) -> bool:
        """id 로 찾은 게시글에 서버 응답 값을 덮어씁니다. 없으면 False."""
        with self._state_lock:
            targets = [post for post in (self.find(post_id), self.selected)
                       if post is not None and post.id == post_id]
            if not targets:
                return False
            for post in {id(post): post for post in targets}.values():
                self._merge(post, changes)
            self._refilter()
            return True

    def toggle_like(self, post: Post) -> Mutation:
        mutation = Mutation('toggle_like', post.id)
        if not self.context.is_authenticated:
            return self._require_auth(mutation)
        try:
            result = self.api.post(f'/posts/{post.id}/like', auth=True)
        except ClientError as e:
            self.context.presenter.show_modal(e)
            return mutation.roll_back(e)
        likes = set(result.get('likes', []))
        self.apply_remote_update(post.id, {'likes': likes, 'likes_count': result.get('likes_count', len(likes))})
        return mutation.confirm()

    def rate(self, post: Post, value: int) -> Mutation:
        mutation = Mutation('rate', post.id)
        try:
            data = RatingCreateSchema().load({'rating': value})
        except ValidationError as err:
            return mutation.roll_back(ValidationFailure(err.messages))
        if not self.context.is_authenticated:
            return self._require_auth(mutation)
        try:
            result = self.api.post(f'/posts/{post.id}/ratings', json=data, auth=True)
        except ClientError as e:
            self.context.presenter.show_modal(e)
            return mutation.roll_back(e)
        self.apply_remote_update(post.id, {
            'average_rating': result['average_rating'],
            'total_ratings': result['total_ratings'],
        })
        return mutation.confirm()

    def _require_auth(self, mutation: Mutation) -> Mutation:
        error = AuthRequired()
        self.context.presenter.show_modal(error)
        return mutation.roll_back(error)

    @staticmethod
    def _merge(post: Post, changes: Dict[str, Any]) -> None:
        for name, value in changes.items():
            if name in MERGEABLE_FIELDS:
                setattr(post, name, value)

    # ---------------------------------------------------------------- 주기적 새로고침
    def start_auto_refresh(self) -> None:
        self._refresh_task.start()

    def stop_auto_refresh(self) -> None:
        self._refresh_task.stop()
