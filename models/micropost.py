"""Micropost model."""

from datetime import datetime

from . import db

MAX_CONTENT_LENGTH = 140


class Micropost(db.Model):
    """A short post owned by exactly one user."""

    __tablename__ = "microposts"
    __table_args__ = (
        db.Index("ix_microposts_user_id_created_at", "user_id", "created_at"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.String(MAX_CONTENT_LENGTH), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    author = db.relationship(
        "User",
        backref=db.backref("microposts", lazy="dynamic", passive_deletes=True),
    )

    def to_dict(self) -> dict:
        """Serialize the micropost."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
