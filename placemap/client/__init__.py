# placemap/client/__init__.py
"""
placemap 클라이언트 동기화 계층

REST API(/api/v1)를 소비하는 세션 단위 상태 관리 모듈 모음입니다.

    context = ClientContext(ClientConfig.from_env())
    api = ApiClient(context)
    store = PostStore(context, api)
    favorites = FavoriteTracker(context, api, store)
    saved_locations = SavedLocationTracker(context, api)
    feed = NotificationFeed(context, api)
    geocoder = Geocoder(context)
"""

from .config import ClientConfig
from .context import ClientContext
from .api_client import ApiClient
from .presenter import Presenter
from .mutation import Mutation, MutationPhase
from .filters import FilterState, apply_filters
from .post_store import PostStore
from .favorites import FavoriteTracker
from .saved_locations import SavedLocationTracker
from .geocoding import Geocoder
from .notification_feed import NotificationFeed
from .scheduler import PeriodicTask

__all__ = [
    'ClientConfig', 'ClientContext', 'ApiClient', 'Presenter',
    'Mutation', 'MutationPhase', 'FilterState', 'apply_filters',
    'PostStore', 'FavoriteTracker', 'SavedLocationTracker', 'Geocoder',
    'NotificationFeed', 'PeriodicTask',
]
