# placemap/utils/__init__.py
"""
유틸리티 모듈 패키지

서버(API)와 클라이언트 동기화 계층에서 공통으로 사용하는 함수들을 포함합니다.
"""

from .datetime_utils import (
    DateTimeUtils,
    now, parse_iso, to_iso,
    for_firestore, from_firestore,
)

__all__ = [
    'DateTimeUtils',
    'now', 'parse_iso', 'to_iso',
    'for_firestore', 'from_firestore',
]
