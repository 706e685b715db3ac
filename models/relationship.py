"""Follow edge between two users."""

from datetime import datetime

from . import db


class Relationship(db.Model):
    """Directed edge: ``follower`` sees ``followed``'s posts in their feed."""

    __tablename__ = "relationships"
    __table_args__ = (
        db.UniqueConstraint("follower_id", "followed_id", name="uq_relationships_pair"),
        db.CheckConstraint("follower_id <> followed_id", name="ck_relationships_no_self"),
        db.Index("ix_relationships_followed_id", "followed_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    follower_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    followed_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Relationship {self.follower_id}->{self.followed_id}>"
