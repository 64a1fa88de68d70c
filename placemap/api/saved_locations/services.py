# placemap/api/saved_locations/services.py
import logging
from dataclasses import asdict
from typing import Any, Dict, List

from firebase_admin import firestore

from placemap.models.user import SavedLocation
from placemap.utils.datetime_utils import DateTimeUtils


class AlreadySavedError(Exception):
    """이미 저장한 장소를 다시 저장하려 할 때 발생합니다."""


class SavedLocationService:
    """
    사용자가 저장한 장소 목록을 관리하는 서비스 클래스.
    - 'saved_locations' 컬렉션에 f"{user_id}_{location_id}" 문서로 저장합니다.
    - 변경 API 는 모두 변경 후의 전체 목록(최근 저장순)을 돌려줍니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.saved_locations_ref = self.db.collection('saved_locations')

    @staticmethod
    def _doc_id(user_id: str, location_id: str) -> str:
        return f"{user_id}_{location_id}"

    def get_saved_locations(self, user_id: str) -> List[Dict[str, Any]]:
        docs = (self.saved_locations_ref
                .where('user_id', '==', user_id)
                .order_by('saved_at', direction=firestore.Query.DESCENDING)
                .stream())
        return [DateTimeUtils.from_firestore(doc.to_dict()) for doc in docs]

    def add_saved_location(self, user_id: str, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        location_ref = self.saved_locations_ref.document(self._doc_id(user_id, data['location_id']))
        if location_ref.get().exists:
            raise AlreadySavedError("이미 저장한 장소입니다.")

        location_ref.set(asdict(SavedLocation(user_id=user_id, **data)))
        logging.info(f"장소 저장 (user_id: {user_id}, location_id: {data['location_id']})")
        return self.get_saved_locations(user_id)

    def remove_saved_location(self, user_id: str, location_id: str) -> List[Dict[str, Any]]:
        """저장하지 않은 장소를 지워도 오류 없이 현재 목록을 돌려줍니다."""
        self.saved_locations_ref.document(self._doc_id(user_id, location_id)).delete()
        logging.info(f"저장 장소 삭제 (user_id: {user_id}, location_id: {location_id})")
        return self.get_saved_locations(user_id)
