"""Tests for the user lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from models import db
from models.micropost import Micropost
from models.relationship import Relationship
from models.user import User
from services.exceptions import InvalidToken, TokenExpired, ValidationError
from services.registry import ProfileUpdate

from conftest import PASSWORD, last_token, signup_attrs


def test_create_stores_pending_user_and_mails_activation(services, mailer):
    user = services.registry.create(signup_attrs("New@Example.com"))

    assert user.email == "new@example.com"
    assert user.activated is False
    assert user.activation_state == "pending"
    assert user.admin is False
    assert user.password_hash != PASSWORD
    assert user.activation_digest is not None
    assert user.activation_sent_at is not None

    raw = last_token(mailer)
    assert mailer.outbox[-1]["to"] == "new@example.com"
    assert user.activation_digest == services.tokens.digest(raw)
    assert raw != user.activation_digest


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"email": ""}, "email"),
        ({"email": "user@example,com"}, "email"),
        ({"email": "user_at_foo.org"}, "email"),
        ({"email": "a" * 250 + "@example.com"}, "email"),
        ({"first_name": " "}, "first_name"),
        ({"last_name": "x" * 51}, "last_name"),
        ({"password": "", "password_confirmation": ""}, "password"),
        ({"password": "abc", "password_confirmation": "abc"}, "password"),
        ({"password_confirmation": "mismatch"}, "password_confirmation"),
    ],
)
def test_create_validation(services, overrides, field):
    attrs = signup_attrs("valid@example.com")
    attrs.update(overrides)

    with pytest.raises(ValidationError) as excinfo:
        services.registry.create(attrs)

    assert field in excinfo.value.errors
    assert User.query.count() == 0


def test_create_rejects_duplicate_email_case_insensitively(services, make_user):
    make_user("dup@example.com")

    with pytest.raises(ValidationError) as excinfo:
        services.registry.create(signup_attrs("DUP@example.com"))

    assert excinfo.value.errors["email"] == ["has already been taken"]


def test_create_ignores_admin_and_activation_keys(services):
    attrs = signup_attrs("sneaky@example.com", admin=True, activated=True)

    user = services.registry.create(attrs)

    assert user.admin is False
    assert user.activated is False


def test_mail_failure_is_logged_not_raised(services, monkeypatch, caplog):
    def _boom(email, raw_token):
        raise ConnectionError("smtp down")

    monkeypatch.setattr(services.registry.mailer, "deliver_activation", _boom)

    user = services.registry.create(signup_attrs("offline@example.com"))

    assert user.id is not None
    assert "Mail delivery" in caplog.text


def test_activation_token_is_single_use(services, mailer):
    user = services.registry.create(signup_attrs("act@example.com"))
    raw = last_token(mailer)

    activated = services.registry.activate("ACT@example.com", raw)
    assert activated.id == user.id
    assert activated.activated is True
    assert activated.activated_at is not None
    assert activated.activation_digest is None

    with pytest.raises(InvalidToken):
        services.registry.activate("act@example.com", raw)


def test_activation_with_wrong_token_or_unknown_email(services, mailer):
    services.registry.create(signup_attrs("act@example.com"))
    raw = last_token(mailer)

    with pytest.raises(InvalidToken):
        services.registry.activate("act@example.com", "wrong")
    with pytest.raises(InvalidToken):
        services.registry.activate("missing@example.com", raw)
    assert services.registry.find_by_email("act@example.com").activated is False


def test_activation_expiry_is_configurable(services, mailer):
    user = services.registry.create(signup_attrs("late@example.com"))
    raw = last_token(mailer)
    user.activation_sent_at = datetime.utcnow() - timedelta(days=30)
    db.session.commit()

    services.registry.activation_ttl = timedelta(hours=24)
    with pytest.raises(TokenExpired):
        services.registry.activate("late@example.com", raw)

    services.registry.activation_ttl = None
    assert services.registry.activate("late@example.com", raw).activated is True


def test_resend_activation_rotates_token(services, mailer):
    services.registry.create(signup_attrs("again@example.com"))
    first = last_token(mailer)

    services.registry.resend_activation("again@example.com")
    second = last_token(mailer)

    assert first != second
    with pytest.raises(InvalidToken):
        services.registry.activate("again@example.com", first)
    assert services.registry.activate("again@example.com", second).activated is True

    sent = len(mailer.outbox)
    services.registry.resend_activation("again@example.com")
    services.registry.resend_activation("nobody@example.com")
    assert len(mailer.outbox) == sent


def test_update_whitelists_profile_fields(services, make_user):
    user = make_user("plain@example.com")

    services.registry.update(
        user,
        {"first_name": "Changed", "admin": True, "activated": False, "remember_digest": "x"},
    )
    db.session.refresh(user)

    assert user.first_name == "Changed"
    assert user.admin is False
    assert user.activated is True
    assert user.remember_digest is None


def test_profile_update_has_no_admin_field():
    with pytest.raises(TypeError):
        ProfileUpdate(admin=True)  # type: ignore[call-arg]
    assert not hasattr(ProfileUpdate.from_mapping({"admin": True}), "admin")


def test_update_changes_email_and_password(services, make_user):
    user = make_user("old@example.com")

    services.registry.update(
        user,
        {"email": "New@Example.com", "password": "newpass99", "password_confirmation": "newpass99"},
    )

    assert user.email == "new@example.com"
    assert services.sessions.authenticate_credentials("new@example.com", "newpass99").id == user.id


def test_update_with_blank_password_keeps_existing(services, make_user):
    user = make_user("keep@example.com")
    digest = user.password_hash

    services.registry.update(user, {"last_name": "Other", "password": "", "password_confirmation": ""})

    assert user.password_hash == digest
    assert user.last_name == "Other"


def test_update_rejects_taken_email(services, make_user):
    make_user("taken@example.com")
    user = make_user("mine@example.com")

    with pytest.raises(ValidationError) as excinfo:
        services.registry.update(user, {"email": "TAKEN@example.com"})

    assert "email" in excinfo.value.errors
    assert user.email == "mine@example.com"


def test_set_admin_is_explicit(services, make_user):
    user = make_user()

    services.registry.set_admin(user, True)

    assert db.session.get(User, user.id).admin is True


def test_destroy_cascades_edges_and_posts(services, make_user):
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    carol = make_user("carol@example.com")
    services.graph.follow(alice, bob)
    services.graph.follow(bob, alice)
    services.graph.follow(carol, alice)
    services.graph.follow(bob, carol)
    db.session.add_all(
        [
            Micropost(user_id=alice.id, content="first"),
            Micropost(user_id=alice.id, content="second"),
            Micropost(user_id=bob.id, content="bob's"),
        ]
    )
    db.session.commit()
    alice_id = alice.id

    services.registry.destroy(alice)

    assert db.session.get(User, alice_id) is None
    assert Relationship.query.filter(
        (Relationship.follower_id == alice_id) | (Relationship.followed_id == alice_id)
    ).count() == 0
    assert Micropost.query.filter_by(user_id=alice_id).count() == 0
    assert Micropost.query.filter_by(user_id=bob.id).count() == 1
    assert services.graph.following_count(bob) == 1
    assert services.graph.follower_count(bob) == 0
    assert services.graph.following_count(carol) == 0
    assert services.graph.follower_count(carol) == 1


def test_destroy_rolls_back_on_failure(services, make_user, monkeypatch):
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    services.graph.follow(bob, alice)
    db.session.add(Micropost(user_id=alice.id, content="kept"))
    db.session.commit()
    alice_id = alice.id

    def _fail_delete(self, instance):
        raise RuntimeError("disk full")

    monkeypatch.setattr(type(db.session), "delete", _fail_delete)
    with pytest.raises(RuntimeError):
        services.registry.destroy(alice)
    monkeypatch.undo()

    assert db.session.get(User, alice_id) is not None
    assert services.graph.follower_count(db.session.get(User, alice_id)) == 1
    assert Micropost.query.filter_by(user_id=alice_id).count() == 1


def test_password_reset_flow(services, make_user, mailer):
    user = make_user("reset@example.com")
    user.remember_digest = "stale"
    db.session.commit()

    services.registry.request_password_reset("RESET@example.com")
    raw = last_token(mailer, "password_reset")
    assert user.reset_digest == services.tokens.digest(raw)

    services.registry.reset_password("reset@example.com", raw, "brandnew1", "brandnew1")

    assert user.reset_digest is None
    assert user.remember_digest is None
    assert services.sessions.authenticate_credentials("reset@example.com", "brandnew1").id == user.id
    with pytest.raises(InvalidToken):
        services.registry.reset_password("reset@example.com", raw, "another1", "another1")


def test_password_reset_validation_and_expiry(services, make_user, mailer):
    user = make_user("reset@example.com")
    services.registry.request_password_reset("reset@example.com")
    raw = last_token(mailer, "password_reset")

    with pytest.raises(ValidationError):
        services.registry.reset_password("reset@example.com", raw, "short", "short")
    with pytest.raises(ValidationError):
        services.registry.reset_password("reset@example.com", raw, "", "")

    user.reset_sent_at = datetime.utcnow() - timedelta(hours=3)
    db.session.commit()
    with pytest.raises(TokenExpired):
        services.registry.reset_password("reset@example.com", raw, "brandnew1", "brandnew1")


def test_password_reset_request_for_unknown_email_is_silent(services, make_user, mailer):
    make_user("pending@example.com", activated=False)
    sent = len(mailer.outbox)

    services.registry.request_password_reset("nobody@example.com")
    services.registry.request_password_reset("pending@example.com")

    assert len(mailer.outbox) == sent


def test_password_reset_coerces_non_string_password(services, make_user, mailer):
    user = make_user("reset@example.com")
    services.registry.request_password_reset("reset@example.com")
    raw = last_token(mailer, "password_reset")

    with pytest.raises(ValidationError) as excinfo:
        services.registry.reset_password("reset@example.com", raw, 123, 123)
    assert "password" in excinfo.value.errors

    services.registry.reset_password("reset@example.com", raw, 12345678, 12345678)
    assert services.sessions.authenticate_credentials("reset@example.com", "12345678").id == user.id


def test_non_string_token_is_invalid(services, make_user, mailer):
    services.registry.create(signup_attrs("act@example.com"))

    with pytest.raises(InvalidToken):
        services.registry.activate("act@example.com", 12345)
    with pytest.raises(InvalidToken):
        services.registry.activate(12345, last_token(mailer))


def test_activate_without_token_for_seeding(services, make_user):
    user = make_user("seed@example.com", activated=False)

    services.registry.activate_without_token(user)

    assert user.activated is True
    assert user.activated_at is not None
    assert user.activation_digest is None
    assert services.registry.activate_without_token(user) is user
