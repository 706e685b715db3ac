"""Seed demo users, follow edges and microposts."""

from datetime import datetime, timedelta

from app import create_app
from models import db, transaction
from models.micropost import Micropost
from models.user import User
from services.container import get_services

DEMO_PASSWORD = "DemoPass123"

DEMO_USERS = [
    ("ada@example.com", "Ada", "Lovelace"),
    ("alan@example.com", "Alan", "Turing"),
    ("grace@example.com", "Grace", "Hopper"),
    ("edsger@example.com", "Edsger", "Dijkstra"),
]

DEMO_POSTS = [
    "Notes on the analytical engine.",
    "Can machines think?",
    "It's easier to ask forgiveness than it is to get permission.",
    "Simplicity is prerequisite for reliability.",
]


def get_or_create_user(email: str, first_name: str, last_name: str) -> User:
    services = get_services()
    user = services.registry.find_by_email(email)
    if user is None:
        user = services.registry.create(
            {
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "password": DEMO_PASSWORD,
                "password_confirmation": DEMO_PASSWORD,
            }
        )
    return services.registry.activate_without_token(user)


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        graph = get_services().graph
        users = [get_or_create_user(*row) for row in DEMO_USERS]

        now = datetime.utcnow()
        with transaction() as session:
            for offset, (user, content) in enumerate(zip(users, DEMO_POSTS)):
                if user.microposts.count() == 0:
                    session.add(
                        Micropost(
                            user_id=user.id,
                            content=content,
                            created_at=now - timedelta(minutes=offset),
                        )
                    )

        for follower in users:
            for followed in users:
                graph.follow(follower, followed)

        print(f"Seeded {len(users)} users with follow edges and microposts.")


if __name__ == "__main__":
    main()
