"""Seed an activated administrator user."""

import os

from app import create_app
from services.container import get_services

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        registry = get_services().registry
        admin = registry.find_by_email(ADMIN_EMAIL)
        if admin is None:
            admin = registry.create(
                {
                    "email": ADMIN_EMAIL,
                    "first_name": "Site",
                    "last_name": "Admin",
                    "password": ADMIN_PASSWORD,
                    "password_confirmation": ADMIN_PASSWORD,
                }
            )
            action = "created"
        else:
            registry.update(
                admin,
                {"password": ADMIN_PASSWORD, "password_confirmation": ADMIN_PASSWORD},
            )
            action = "updated"
        registry.activate_without_token(admin)
        registry.set_admin(admin, True)
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
