"""Tests for password hashing."""

import pytest

from security.passwords import CredentialStore


@pytest.fixture()
def store() -> CredentialStore:
    return CredentialStore("pbkdf2:sha256:1000")


def test_digest_is_salted_and_not_plaintext(store):
    first = store.set_password("foobar123")
    second = store.set_password("foobar123")

    assert "foobar123" not in first
    assert first != second
    assert first.startswith("pbkdf2:sha256")


def test_verify_accepts_only_the_original_password(store):
    digest = store.set_password("foobar123")

    assert store.verify("foobar123", digest) is True
    assert store.verify("foobar124", digest) is False


@pytest.mark.parametrize(
    "plain, digest",
    [
        ("", "pbkdf2:sha256:1000$salt$abc"),
        (None, "pbkdf2:sha256:1000$salt$abc"),
        ("foobar123", ""),
        ("foobar123", None),
        ("foobar123", "not-a-digest"),
        ("foobar123", "md5$$"),
    ],
)
def test_verify_returns_false_for_malformed_input(store, plain, digest):
    assert store.verify(plain, digest) is False


def test_default_method_uses_werkzeug_default():
    store = CredentialStore()
    digest = store.set_password("foobar123")

    assert store.verify("foobar123", digest) is True


@pytest.mark.parametrize("plain", [12345678, 1.5, ["foobar123"], {"p": 1}, b"foobar123", True])
def test_verify_returns_false_for_non_string_password(store, plain):
    digest = store.set_password("12345678")

    assert store.verify(plain, digest) is False


def test_verify_returns_false_for_non_string_digest(store):
    assert store.verify("foobar123", 12345) is False


def test_verify_placeholder_always_fails_and_hashes_once(store, monkeypatch):
    calls = []
    original = store.set_password
    monkeypatch.setattr(store, "set_password", lambda plain: calls.append(plain) or original(plain))

    assert store.verify_placeholder("foobar123") is False
    assert store.verify_placeholder(12345678) is False
    assert store.verify_placeholder(None) is False
    assert len(calls) == 1
