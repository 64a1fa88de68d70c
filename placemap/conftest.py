# placemap/conftest.py
"""
공용 pytest fixture

서버 라우트 테스트는 실제 Firestore 대신 app.services 에 MagicMock 서비스를 주입합니다.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token

from placemap import create_app

TEST_USER_ID = 'user-1'


@pytest.fixture
def app():
    app = create_app('testing')
    app.services.update({
        'posts': MagicMock(),
        'favorites': MagicMock(),
        'saved_locations': MagicMock(),
        'notifications': MagicMock(),
        'users': MagicMock(),
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    with app.app_context():
        token = create_access_token(identity=TEST_USER_ID)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def post_dict():
    """서비스 계층이 돌려주는 게시글 dict 형식"""
    return {
        'post_id': 'p1',
        'title': 'Mountain View',
        'description': '산 정상 전망대',
        'category': 'nature',
        'location': {'latitude': 55.7, 'longitude': 12.5, 'type': 'Point', 'coordinates': [12.5, 55.7]},
        'images': [],
        'price': 0.0,
        'tags': ['hiking'],
        'average_rating': 4.5,
        'total_ratings': 2,
        'like_user_ids': ['user-2'],
        'likes_count': 1,
        'comment_count': 0,
        'posted_by': {'user_id': TEST_USER_ID, 'name': 'Kim', 'avatar_url': None},
        'date_posted': datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        'updated_at': datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    }
