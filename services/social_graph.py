"""Directed follow edges and the timeline built from them."""

from __future__ import annotations

import logging

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError

from models import db, transaction
from models.micropost import Micropost
from models.relationship import Relationship
from models.user import User

logger = logging.getLogger(__name__)


class SocialGraph:
    """Follow/unfollow plus the queries derived from live edges."""

    def is_following(self, follower: User, followed: User) -> bool:
        return db.session.query(
            exists().where(
                Relationship.follower_id == follower.id,
                Relationship.followed_id == followed.id,
            )
        ).scalar()

    def follow(self, follower: User, followed: User) -> bool:
        """Create the edge; ``False`` when it is a self follow or already exists."""

        if follower.id == followed.id:
            return False
        if self.is_following(follower, followed):
            return False
        try:
            with transaction() as session:
                session.add(Relationship(follower_id=follower.id, followed_id=followed.id))
        except IntegrityError:
            # A concurrent request inserted the same pair first.
            logger.info("Duplicate follow %s->%s ignored", follower.id, followed.id)
            return False
        return True

    def unfollow(self, follower: User, followed: User) -> bool:
        """Remove the edge; ``False`` when there was none."""

        with transaction() as session:
            removed = (
                session.query(Relationship)
                .filter_by(follower_id=follower.id, followed_id=followed.id)
                .delete(synchronize_session=False)
            )
        return bool(removed)

    def following_count(self, user: User) -> int:
        return (
            db.session.query(func.count(Relationship.id))
            .filter(Relationship.follower_id == user.id)
            .scalar()
        )

    def follower_count(self, user: User) -> int:
        return (
            db.session.query(func.count(Relationship.id))
            .filter(Relationship.followed_id == user.id)
            .scalar()
        )

    def following(self, user: User):
        """Query of users ``user`` follows."""
        return User.query.join(Relationship, Relationship.followed_id == User.id).filter(
            Relationship.follower_id == user.id
        )

    def followers(self, user: User):
        """Query of users following ``user``."""
        return User.query.join(Relationship, Relationship.follower_id == User.id).filter(
            Relationship.followed_id == user.id
        )

    def feed_scope(self, user: User):
        """Predicate over microposts: by ``user`` or by anyone ``user`` follows.

        The followed ids are a subquery, evaluated against the edges present
        when the query runs.
        """
        followed_ids = select(Relationship.followed_id).where(
            Relationship.follower_id == user.id
        )
        return or_(Micropost.user_id == user.id, Micropost.user_id.in_(followed_ids))

    def feed(self, user: User):
        """Query of timeline microposts, newest first."""
        return Micropost.query.filter(self.feed_scope(user)).order_by(
            Micropost.created_at.desc(), Micropost.id.desc()
        )
