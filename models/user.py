"""User model definition."""

from datetime import datetime

from . import db


class User(db.Model):
    """An account holder; email is stored lowercased."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    admin = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    activated = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    activation_digest = db.Column(db.String(64), nullable=True)
    activation_sent_at = db.Column(db.DateTime, nullable=True)
    activated_at = db.Column(db.DateTime, nullable=True)
    remember_digest = db.Column(db.String(64), nullable=True)
    reset_digest = db.Column(db.String(64), nullable=True)
    reset_sent_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def activation_state(self) -> str:
        return "active" if self.activated else "pending"

    def to_dict(self, include_private: bool = False) -> dict:
        """Serialize the user. Token and password digests are never included."""

        data = {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_private:
            data.update(
                {
                    "email": self.email,
                    "admin": bool(self.admin),
                    "activated": bool(self.activated),
                }
            )
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
