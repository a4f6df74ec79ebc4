from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.sql import func

from app.core.config import settings
from app.models.comment import Comment
from app.models.follow import Follow
from app.models.like import Like
from app.models.post import Post
from app.schemas.comment import CommentPreview
from app.schemas.post import PostResponse
from app.schemas.user import UserForPost

PREVIEW_COMMENT_COUNT = 2


@dataclass
class FeedPage:
    posts: List[PostResponse] = field(default_factory=list)
    has_more: bool = False
    total: int = 0


def _recent_first(query):
    return query.order_by(Post.created_at.desc(), Post.id.desc())


def _like_counts(db: Session, post_ids: Iterable[int]) -> Dict[int, int]:
    """게시물별 좋아요 수"""
    return dict(
        db.query(Like.post_id, func.count())
        .filter(Like.post_id.in_(list(post_ids)))
        .group_by(Like.post_id)
        .all()
    )


def _liked_post_ids(db: Session, post_ids: Iterable[int], current_user_id: Optional[int]) -> Set[int]:
    """현재 사용자가 좋아요 누른 게시물 ID 집합"""
    if current_user_id is None:
        return set()
    rows = (
        db.query(Like.post_id)
        .filter(Like.user_id == current_user_id, Like.post_id.in_(list(post_ids)))
        .all()
    )
    return {row.post_id for row in rows}


def _comment_counts(db: Session, post_ids: Iterable[int]) -> Dict[int, int]:
    """게시물별 전체 댓글 수"""
    return dict(
        db.query(Comment.post_id, func.count())
        .filter(Comment.post_id.in_(list(post_ids)))
        .group_by(Comment.post_id)
        .all()
    )


def _recent_comments(db: Session, post_ids: List[int], per_post: int = PREVIEW_COMMENT_COUNT) -> Dict[int, List[Comment]]:
    """
    게시물별 최신 댓글 N개.
    row_number() 윈도 함수로 게시물마다 순위를 매긴 뒤 상위 N개만 가져옵니다.
    """
    ranked = (
        select(
            Comment.id.label("comment_id"),
            func.row_number()
            .over(
                partition_by=Comment.post_id,
                order_by=(Comment.created_at.desc(), Comment.id.desc()),
            )
            .label("rank"),
        )
        .where(Comment.post_id.in_(post_ids))
        .subquery()
    )

    comments = (
        db.query(Comment)
        .join(ranked, Comment.id == ranked.c.comment_id)
        .filter(ranked.c.rank <= per_post)
        .options(joinedload(Comment.user))
        .order_by(Comment.post_id, Comment.created_at.desc(), Comment.id.desc())
        .all()
    )

    comments_by_post: Dict[int, List[Comment]] = {}
    for comment in comments:
        comments_by_post.setdefault(comment.post_id, []).append(comment)
    return comments_by_post


def to_comment_preview(comment: Comment) -> CommentPreview:
    return CommentPreview(
        id=comment.id,
        username=comment.user.name if comment.user else "알 수 없음",
        content=comment.content,
        user_id=comment.user_id,
        created_at=comment.created_at,
    )


def to_post_response(
    post: Post,
    like_count: int = 0,
    is_liked: bool = False,
    comments: Optional[List[Comment]] = None,
    total_comments: int = 0,
) -> PostResponse:
    user = None
    if post.user:
        user = UserForPost(
            id=post.user.id,
            name=post.user.name,
            profile_image_url=post.user.profile_image_url,
        )
    return PostResponse(
        id=post.id,
        user_id=post.user_id,
        image_url=settings.get_image_url(post.image_key),
        caption=post.caption or None,
        created_at=post.created_at,
        user=user,
        like_count=like_count,
        is_liked=is_liked,
        comments=[to_comment_preview(c) for c in comments or []],
        total_comments=total_comments,
    )


def get_feed_page(
    db: Session,
    page: int,
    limit: int,
    user_id: Optional[int] = None,
    current_user_id: Optional[int] = None,
) -> FeedPage:
    """
    최신순 게시물 목록 (오프셋 페이지네이션)

    1. 게시물 + 작성자 조회
    2. 좋아요 수 / 현재 사용자 좋아요 여부
    3. 게시물별 최신 댓글 2개 및 전체 댓글 수
    """
    offset = (page - 1) * limit

    base_query = db.query(Post)
    if user_id is not None:
        base_query = base_query.filter(Post.user_id == user_id)

    total = base_query.count()

    posts = (
        _recent_first(base_query.options(joinedload(Post.user)))
        .offset(offset)
        .limit(limit)
        .all()
    )
    if not posts:
        return FeedPage(posts=[], has_more=False, total=total)

    post_ids = [post.id for post in posts]
    like_counts = _like_counts(db, post_ids)
    liked_ids = _liked_post_ids(db, post_ids, current_user_id)
    recent_comments = _recent_comments(db, post_ids)
    comment_counts = _comment_counts(db, post_ids)

    responses = [
        to_post_response(
            post,
            like_count=like_counts.get(post.id, 0),
            is_liked=post.id in liked_ids,
            comments=recent_comments.get(post.id, []),
            total_comments=comment_counts.get(post.id, 0),
        )
        for post in posts
    ]
    return FeedPage(posts=responses, has_more=offset + len(posts) < total, total=total)


def get_post(db: Session, post_id: int) -> Optional[Post]:
    return db.query(Post).filter(Post.id == post_id).first()


def get_post_detail(db: Session, post_id: int, current_user_id: Optional[int] = None) -> Optional[PostResponse]:
    """게시물 상세 (전체 댓글 포함, 최신순)"""
    post = (
        db.query(Post)
        .options(joinedload(Post.user))
        .filter(Post.id == post_id)
        .first()
    )
    if not post:
        return None

    comments = (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )
    return to_post_response(
        post,
        like_count=count_likes(db, post_id),
        is_liked=bool(_liked_post_ids(db, [post_id], current_user_id)),
        comments=comments,
        total_comments=len(comments),
    )


def count_likes(db: Session, post_id: int) -> int:
    return db.query(Like).filter(Like.post_id == post_id).count()


def count_user_posts(db: Session, user_id: int) -> int:
    return db.query(Post).filter(Post.user_id == user_id).count()


def count_followers(db: Session, user_id: int) -> int:
    return db.query(Follow).filter(Follow.following_id == user_id).count()


def count_following(db: Session, user_id: int) -> int:
    return db.query(Follow).filter(Follow.follower_id == user_id).count()


def is_following(db: Session, follower_id: int, following_id: int) -> bool:
    return (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .first()
        is not None
    )
