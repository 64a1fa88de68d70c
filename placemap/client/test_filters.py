# placemap/client/test_filters.py
from datetime import datetime, timedelta, timezone

from placemap.client.filters import FilterState, apply_filters
from placemap.client.models import Post, PostedBy, UserRef

BASE = datetime(2024, 1, 15, tzinfo=timezone.utc)


def make_post(post_id, title='', **kwargs):
    kwargs.setdefault('date_posted', BASE)
    return Post(id=post_id, title=title, position=(55.7, 12.5), **kwargs)


def ids(posts):
    return [post.id for post in posts]


def test_min_rating_keeps_posts_at_or_above_threshold():
    posts = [make_post('1', 'Mountain View', average_rating=4.5), make_post('2', 'City Mall', average_rating=3.0)]

    assert ids(apply_filters(posts, FilterState(min_rating=4))) == ['1']


def test_text_query_matches_title_case_insensitively():
    posts = [make_post('1', 'Mountain View'), make_post('2', 'City Mall')]

    assert ids(apply_filters(posts, FilterState(query='mountain'))) == ['1']


def test_text_query_covers_poster_name_category_and_tags():
    posts = [
        make_post('1', posted_by=PostedBy(PostedBy.USER_REF, UserRef('u1', 'Hana'))),
        make_post('2', posted_by=PostedBy(PostedBy.NAME_ONLY, 'someone')),
        make_post('3', category='food'),
        make_post('4', tags=['Sunset']),
    ]

    assert ids(apply_filters(posts, FilterState(query='hana'))) == ['1']
    assert ids(apply_filters(posts, FilterState(query='FOOD'))) == ['3']
    assert ids(apply_filters(posts, FilterState(query='sunset'))) == ['4']


def test_empty_query_skips_text_filter():
    posts = [make_post('1', 'a'), make_post('2', 'b')]
    assert ids(apply_filters(posts, FilterState(query='   '))) == ['1', '2']


def test_category_filter():
    posts = [make_post('1', category='food'), make_post('2', category='nature')]

    assert ids(apply_filters(posts, FilterState(category='Food'))) == ['1']
    assert ids(apply_filters(posts, FilterState(category='all'))) == ['1', '2']


def test_price_buckets():
    posts = [make_post(str(i), price=price) for i, price in enumerate([0, 5, 10, 10.5, 50, 51])]

    assert ids(apply_filters(posts, FilterState(price='free'))) == ['0']
    assert ids(apply_filters(posts, FilterState(price='low'))) == ['1', '2']
    assert ids(apply_filters(posts, FilterState(price='medium'))) == ['3', '4']
    assert ids(apply_filters(posts, FilterState(price='high'))) == ['5']
    assert len(apply_filters(posts, FilterState(price='unknown'))) == 6


def test_newest_sort_is_strictly_descending():
    posts = [make_post(str(i), date_posted=BASE + timedelta(hours=i)) for i in (2, 0, 3, 1)]

    result = apply_filters(posts, FilterState(sort='newest'))

    dates = [post.date_posted for post in result]
    assert all(a > b for a, b in zip(dates, dates[1:]))


def test_sort_ties_keep_input_order():
    posts = [make_post('a', average_rating=4.0), make_post('b', average_rating=5.0),
             make_post('c', average_rating=4.0), make_post('d')]

    assert ids(apply_filters(posts, FilterState(sort='newest'))) == ['a', 'b', 'c', 'd']
    assert ids(apply_filters(posts, FilterState(sort='rating'))) == ['b', 'a', 'c', 'd']


def test_oldest_and_popular_sort():
    posts = [make_post('1', date_posted=BASE + timedelta(days=1), total_ratings=1),
             make_post('2', date_posted=BASE, total_ratings=9)]

    assert ids(apply_filters(posts, FilterState(sort='oldest'))) == ['2', '1']
    assert ids(apply_filters(posts, FilterState(sort='popular'))) == ['2', '1']


def test_unknown_sort_key_is_pass_through():
    posts = [make_post('2', average_rating=1.0), make_post('1', average_rating=5.0)]
    assert ids(apply_filters(posts, FilterState(sort='distance'))) == ['2', '1']


def test_filters_are_idempotent_and_pure():
    posts = [make_post(str(i), f'place {i}', average_rating=i % 5, price=i * 7,
                       date_posted=BASE + timedelta(minutes=i % 3)) for i in range(20)]
    original = list(posts)
    state = FilterState(query='place', min_rating=2, price='medium', sort='rating')

    once = apply_filters(posts, state)
    twice = apply_filters(posts, state)

    assert ids(once) == ids(twice)
    assert ids(apply_filters(once, state)) == ids(once)
    assert posts == original
