# placemap/api/favorites/services.py
import logging
from dataclasses import asdict
from typing import List

from firebase_admin import firestore

from placemap.models.user import Favorite


class AlreadyFavoritedError(Exception):
    """이미 즐겨찾기에 등록된 게시글을 다시 등록하려 할 때 발생합니다."""


class FavoriteService:
    """
    즐겨찾기(북마크) 관계를 관리하는 서비스 클래스.
    - 'favorites' 컬렉션에 f"{user_id}_{post_id}" 문서로 (사용자, 게시글) 관계를 저장합니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.favorites_ref = self.db.collection('favorites')
        self.posts_ref = self.db.collection('posts')

    @staticmethod
    def _favorite_id(user_id: str, post_id: str) -> str:
        return f"{user_id}_{post_id}"

    def get_favorite_post_ids(self, user_id: str) -> List[str]:
        """사용자가 즐겨찾기한 게시글 ID 목록을 최근 등록순으로 반환합니다."""
        docs = (self.favorites_ref
                .where('user_id', '==', user_id)
                .order_by('created_at', direction=firestore.Query.DESCENDING)
                .stream())
        return [doc.to_dict().get('post_id') for doc in docs]

    def add_favorite(self, user_id: str, post_id: str) -> None:
        if not self.posts_ref.document(post_id).get().exists:
            raise ValueError("게시글을 찾을 수 없습니다.")

        favorite_ref = self.favorites_ref.document(self._favorite_id(user_id, post_id))
        if favorite_ref.get().exists:
            raise AlreadyFavoritedError("이미 즐겨찾기한 게시글입니다.")

        favorite_ref.set(asdict(Favorite(user_id=user_id, post_id=post_id)))
        logging.info(f"즐겨찾기 추가 (user_id: {user_id}, post_id: {post_id})")

    def remove_favorite(self, user_id: str, post_id: str) -> None:
        favorite_ref = self.favorites_ref.document(self._favorite_id(user_id, post_id))
        if not favorite_ref.get().exists:
            raise ValueError("즐겨찾기하지 않은 게시글입니다.")
        favorite_ref.delete()
        logging.info(f"즐겨찾기 삭제 (user_id: {user_id}, post_id: {post_id})")
