# placemap/api/posts/services.py
import logging
import uuid
from dataclasses import asdict
from typing import Optional, Dict, Any, Tuple, List

from firebase_admin import firestore

from placemap.models.post import Post, Author, GeoPoint, PostImage, Rating
from placemap.models.comment import Comment
from placemap.models.notification import NotificationType
from placemap.services.notification_service import NotificationService
from placemap.utils.datetime_utils import DateTimeUtils

UPDATABLE_FIELDS = ('title', 'description', 'category', 'price', 'tags')


class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 게시글 CRUD, 좋아요 토글, 평점 집계, 댓글을 처리합니다.
    - 평점 집계(average_rating, total_ratings)는 트랜잭션 안에서만 갱신합니다.
    """
    def __init__(self, notification_service: NotificationService, db=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.ratings_ref = self.db.collection('ratings')
        self.comments_ref = self.db.collection('comments')
        self.notification_service = notification_service

    def _get_author(self, user_id: str) -> Author:
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            raise ValueError("작성자 정보를 찾을 수 없습니다.")
        user_data = user_doc.to_dict()
        return Author(user_id=user_id, name=user_data.get('name'), avatar_url=user_data.get('avatar_url'))

    def create_post(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """새로운 게시글을 생성하고 Firestore 에 저장합니다."""
        author = self._get_author(user_id)

        location = GeoPoint(latitude=data['location']['latitude'], longitude=data['location']['longitude'])
        images = [
            PostImage(url=image['url'], image_id=image.get('image_id') or str(uuid.uuid4()))
            for image in data.get('images', [])
        ]
        new_post = Post(
            post_id=str(uuid.uuid4()),
            title=data['title'],
            description=data['description'],
            category=data.get('category', 'general'),
            location=location,
            posted_by=author,
            images=images,
            price=data.get('price', 0.0),
            tags=data.get('tags', [])
        )

        try:
            post_dict = asdict(new_post)
            self.posts_ref.document(new_post.post_id).set(DateTimeUtils.for_firestore(post_dict))
            logging.info(f"게시글 생성 완료 (post_id: {new_post.post_id}, user_id: {user_id})")
            return post_dict
        except Exception as e:
            logging.error(f"게시글 생성 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise

    def get_posts(self, limit: int, category: Optional[str] = None, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        게시글 목록을 최신순으로 조회합니다.
        - category 는 Firestore 쿼리로, 검색어(query)는 조회 후 메모리에서 거릅니다.
        """
        ref = self.posts_ref
        if category and category != 'all':
            ref = ref.where('category', '==', category)
        docs = ref.order_by('date_posted', direction=firestore.Query.DESCENDING).limit(limit).stream()
        posts = [DateTimeUtils.from_firestore(doc.to_dict()) for doc in docs]

        if query:
            needle = query.strip().lower()
            posts = [p for p in posts if self._matches(p, needle)]
        return posts

    @staticmethod
    def _matches(post: Dict[str, Any], needle: str) -> bool:
        haystack = [post.get('title', ''), post.get('description', ''), *post.get('tags', [])]
        return any(needle in (text or '').lower() for text in haystack)

    def get_post_by_id(self, post_id: str) -> Optional[Dict[str, Any]]:
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        return DateTimeUtils.from_firestore(doc.to_dict())

    def update_post(self, post_id: str, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """작성자 본인만 게시글을 수정할 수 있습니다."""
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise ValueError("게시글을 찾을 수 없습니다.")
        if doc.to_dict().get('posted_by', {}).get('user_id') != user_id:
            raise PermissionError("게시글을 수정할 권한이 없습니다.")

        update_data = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        update_data['updated_at'] = DateTimeUtils.now()
        post_ref.update(update_data)
        return DateTimeUtils.from_firestore(post_ref.get().to_dict())

    def delete_post(self, post_id: str, user_id: str) -> None:
        """작성자 본인만 게시글을 삭제할 수 있습니다. 댓글도 함께 삭제합니다."""
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise ValueError("게시글을 찾을 수 없습니다.")
        if doc.to_dict().get('posted_by', {}).get('user_id') != user_id:
            raise PermissionError("게시글을 삭제할 권한이 없습니다.")

        batch = self.db.batch()
        for comment_doc in self.comments_ref.where('post_id', '==', post_id).stream():
            batch.delete(comment_doc.reference)
        batch.delete(post_ref)
        batch.commit()
        logging.info(f"게시글 삭제 완료 (post_id: {post_id})")

    def toggle_like(self, user_id: str, post_id: str) -> Dict[str, Any]:
        """
        게시글 좋아요를 누르거나 취소합니다.
        - like_user_ids 와 likes_count 를 같은 트랜잭션에서 갱신합니다.
        - 새로운 좋아요인 경우에만 작성자에게 알림을 보냅니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _toggle_in_transaction(transaction, post_id, user_id):
            post_ref = self.posts_ref.document(post_id)
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ValueError("게시글을 찾을 수 없습니다.")

            post_data = snapshot.to_dict()
            like_user_ids = list(post_data.get('like_user_ids', []))
            if user_id in like_user_ids:
                like_user_ids.remove(user_id)
                liked = False
            else:
                like_user_ids.append(user_id)
                liked = True
            transaction.update(post_ref, {'like_user_ids': like_user_ids, 'likes_count': len(like_user_ids)})
            return liked, like_user_ids, post_data

        liked, like_user_ids, post_data = _toggle_in_transaction(transaction, post_id, user_id)

        if liked:
            self.notification_service.create_notification(
                recipient_id=post_data.get('posted_by', {}).get('user_id'),
                sender_id=user_id,
                n_type=NotificationType.LIKE,
                message=f"'{post_data.get('title', '')}' 게시글에 좋아요가 눌렸습니다.",
                related_post=post_id
            )
        return {"post_id": post_id, "liked": liked, "likes": like_user_ids, "likes_count": len(like_user_ids)}

    def rate_post(self, user_id: str, post_id: str, value: int) -> Dict[str, Any]:
        """
        게시글에 평점을 남기거나 기존 평점을 수정합니다. (사용자당 1개)
        평균은 전체 평점을 다시 읽지 않고 증분으로 갱신합니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _rate_in_transaction(transaction, post_id, user_id, value):
            post_ref = self.posts_ref.document(post_id)
            rating_ref = self.ratings_ref.document(f"{user_id}_{post_id}")
            post_snapshot = post_ref.get(transaction=transaction)
            rating_snapshot = rating_ref.get(transaction=transaction)
            if not post_snapshot.exists:
                raise ValueError("게시글을 찾을 수 없습니다.")

            post_data = post_snapshot.to_dict()
            average, total = aggregate_rating(
                post_data.get('average_rating', 0.0),
                post_data.get('total_ratings', 0),
                value,
                rating_snapshot.to_dict().get('value') if rating_snapshot.exists else None
            )
            rating = Rating(user_id=user_id, post_id=post_id, value=value)
            if rating_snapshot.exists:
                transaction.update(rating_ref, {'value': value, 'updated_at': rating.updated_at})
            else:
                transaction.set(rating_ref, asdict(rating))
            transaction.update(post_ref, {'average_rating': average, 'total_ratings': total})
            return average, total, post_data, not rating_snapshot.exists

        average, total, post_data, is_first = _rate_in_transaction(transaction, post_id, user_id, value)

        if is_first:
            self.notification_service.create_notification(
                recipient_id=post_data.get('posted_by', {}).get('user_id'),
                sender_id=user_id,
                n_type=NotificationType.RATING,
                message=f"'{post_data.get('title', '')}' 게시글에 {value}점 평가가 등록되었습니다.",
                related_post=post_id
            )
        return {"post_id": post_id, "average_rating": average, "total_ratings": total}

    def add_comment(self, post_id: str, user_id: str, content: str) -> Dict[str, Any]:
        """댓글을 생성하고 게시글 작성자에게 알림을 보냅니다."""
        author = self._get_author(user_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def _add_in_transaction(transaction, post_id, author, content):
            post_ref = self.posts_ref.document(post_id)
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ValueError("댓글을 작성할 게시글이 존재하지 않습니다.")
            comment = Comment(comment_id=str(uuid.uuid4()), post_id=post_id, author=asdict(author), content=content)
            transaction.set(self.comments_ref.document(comment.comment_id), asdict(comment))
            transaction.update(post_ref, {'comment_count': firestore.Increment(1)})
            return comment, snapshot.to_dict()

        comment, post_data = _add_in_transaction(transaction, post_id, author, content)

        self.notification_service.create_notification(
            recipient_id=post_data.get('posted_by', {}).get('user_id'),
            sender_id=user_id,
            n_type=NotificationType.COMMENT,
            message=f"{author.name or '누군가'}님이 댓글을 남겼습니다: {content[:50]}",
            related_post=post_id
        )
        return asdict(comment)

    def get_comments(self, post_id: str, limit: int) -> List[Dict[str, Any]]:
        """게시글의 댓글을 작성 순서대로 조회합니다."""
        docs = self.comments_ref.where('post_id', '==', post_id).order_by('timestamp').limit(limit).stream()
        return [DateTimeUtils.from_firestore(doc.to_dict()) for doc in docs]


def aggregate_rating(average: float, total: int, value: int, previous: Optional[int] = None) -> Tuple[float, int]:
    """
    평균 평점을 증분 갱신합니다.
    - previous 가 None 이면 새 평점: 개수 1 증가
    - previous 가 있으면 기존 평점 교체: 개수 유지
    """
    if previous is None:
        new_total = total + 1
        new_average = (average * total + value) / new_total
    else:
        new_total = max(total, 1)
        new_average = (average * new_total - previous + value) / new_total
    return new_average, new_total
