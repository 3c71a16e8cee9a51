"""Feed operations: posts, like toggling and comments."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import Forbidden, NotFound
from app.models import Comment, Like, Post, User
from app.schemas import CommentRead, PostCreate, PostRead, PublicUser


def _likes_count(db: Session, post_id: int) -> int:
    return db.execute(select(func.count(Like.id)).where(Like.post_id == post_id)).scalar_one()


def _serialize_post(post: Post, *, likes_count: int, comments_count: int, is_liked: bool) -> PostRead:
    return PostRead(
        id=post.id,
        user_id=post.user_id,
        author=PublicUser.model_validate(post.author),
        content=post.content,
        image_url=post.image_url,
        video_url=post.video_url,
        created_at=post.created_at,
        likes_count=likes_count,
        comments_count=comments_count,
        is_liked=is_liked,
    )


def get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


def list_feed(db: Session, viewer_id: int) -> list[PostRead]:
    """Return all posts, newest first, with counters relative to the viewer."""

    likes = (
        select(func.count(Like.id)).where(Like.post_id == Post.id).correlate(Post).scalar_subquery()
    )
    comments = (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    liked = (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id, Like.user_id == viewer_id)
        .correlate(Post)
        .scalar_subquery()
    )
    stmt = (
        select(Post, likes, comments, liked)
        .options(selectinload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    return [
        _serialize_post(post, likes_count=likes_count, comments_count=comments_count, is_liked=bool(liked_count))
        for post, likes_count, comments_count, liked_count in db.execute(stmt).all()
    ]


def create_post(db: Session, author: User, payload: PostCreate) -> PostRead:
    post = Post(
        user_id=author.id,
        content=payload.content,
        image_url=payload.image_url,
        video_url=payload.video_url,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return _serialize_post(post, likes_count=0, comments_count=0, is_liked=False)


def delete_post(db: Session, post_id: int, actor: User) -> None:
    """Delete a post. Only its author or an administrator may do so."""

    post = get_post(db, post_id)
    if post.user_id != actor.id and not actor.is_admin:
        raise Forbidden("Only the author can delete this post")
    db.delete(post)
    db.commit()


def toggle_like(db: Session, post_id: int, user_id: int) -> tuple[bool, int]:
    """Like the post, or remove the like if one already exists."""

    get_post(db, post_id)
    stmt = select(Like).where(Like.post_id == post_id, Like.user_id == user_id)
    existing = db.execute(stmt).scalar_one_or_none()
    if existing is not None:
        db.delete(existing)
        db.commit()
        return False, _likes_count(db, post_id)

    db.add(Like(post_id=post_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        # Concurrent like from the same user already landed.
        db.rollback()
    return True, _likes_count(db, post_id)


def list_comments(db: Session, post_id: int) -> list[CommentRead]:
    get_post(db, post_id)
    stmt = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(selectinload(Comment.author))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return [CommentRead.model_validate(comment) for comment in db.execute(stmt).scalars()]


def add_comment(db: Session, post_id: int, author: User, content: str) -> CommentRead:
    get_post(db, post_id)
    comment = Comment(post_id=post_id, user_id=author.id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return CommentRead.model_validate(comment)
