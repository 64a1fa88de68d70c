# placemap/api/users/services.py
import logging
from typing import Optional, Dict, Any

from firebase_admin import firestore

from placemap.utils.datetime_utils import DateTimeUtils


class UserService:
    """사용자 문서 조회와 푸시 토큰 등록을 담당합니다."""
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        user = DateTimeUtils.from_firestore(doc.to_dict())
        user.setdefault('user_id', user_id)
        return user

    def update_push_token(self, user_id: str, token: str) -> None:
        """
        사용자의 푸시 토큰을 갱신합니다.
        사용자 문서가 없으면 ValueError 를 발생시킵니다.
        """
        user_ref = self.users_ref.document(user_id)
        if not user_ref.get().exists:
            raise ValueError("사용자를 찾을 수 없습니다.")
        user_ref.update({'push_token': token})
        logging.info(f"푸시 토큰 갱신 완료 (user_id: {user_id})")
