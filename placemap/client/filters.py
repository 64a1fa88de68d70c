# placemap/client/filters.py
"""
게시글 필터/정렬 파이프라인

입력 목록을 바꾸지 않는 순수 함수입니다. 적용 순서는 고정입니다.
텍스트 검색 -> 카테고리 -> 최소 평점 -> 가격대 -> 안정 정렬
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Sequence, Tuple

from placemap.client.models import Post

ALL = 'all'
OLDEST_DATE = datetime.min.replace(tzinfo=timezone.utc)

PRICE_BUCKETS: Dict[str, Callable[[float], bool]] = {
    'free': lambda price: price == 0,
    'low': lambda price: 0 < price <= 10,
    'medium': lambda price: 10 < price <= 50,
    'high': lambda price: price > 50,
}

# 정렬 키 -> (key 함수, 내림차순 여부)
SORT_KEYS: Dict[str, Tuple[Callable[[Post], object], bool]] = {
    'newest': (lambda post: post.date_posted or OLDEST_DATE, True),
    'oldest': (lambda post: post.date_posted or OLDEST_DATE, False),
    'rating': (lambda post: post.average_rating, True),
    'popular': (lambda post: post.total_ratings, True),
}


@dataclass(frozen=True)
class FilterState:
    query: str = ''
    category: str = ALL
    min_rating: float = 0.0
    price: str = ALL
    sort: str = 'newest'


def matches_text(post: Post, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    haystack = [post.title, post.description, post.poster_name, post.category, *post.tags]
    return any(needle in (text or '').lower() for text in haystack)


def matches_category(post: Post, category: str) -> bool:
    if not category or category.lower() == ALL:
        return True
    return (post.category or '').lower() == category.lower()


def matches_price(post: Post, bucket: str) -> bool:
    predicate = PRICE_BUCKETS.get((bucket or ALL).lower())
    return predicate is None or predicate(post.price or 0)


def sort_posts(posts: Sequence[Post], sort_key: str) -> List[Post]:
    """알 수 없는 정렬 키는 입력 순서를 그대로 유지합니다."""
    if sort_key not in SORT_KEYS:
        return list(posts)
    key, reverse = SORT_KEYS[sort_key]
    # sorted 는 reverse=True 에서도 동일 키의 원래 순서를 유지합니다.
    return sorted(posts, key=key, reverse=reverse)


def apply_filters(posts: Sequence[Post], state: FilterState) -> List[Post]:
    result = [post for post in posts if matches_text(post, state.query or '')]
    result = [post for post in result if matches_category(post, state.category)]
    if state.min_rating and state.min_rating > 0:
        result = [post for post in result if post.average_rating >= state.min_rating]
    result = [post for post in result if matches_price(post, state.price)]
    return sort_posts(result, state.sort)
