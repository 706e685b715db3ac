"""Tests for opaque token issuance and verification."""

import hashlib

import pytest

from security.tokens import TokenService


def test_issue_returns_fresh_url_safe_tokens():
    tokens = TokenService()
    issued = {tokens.issue().raw for _ in range(50)}

    assert len(issued) == 50
    for raw in issued:
        assert len(raw) >= 22
        assert all(ch.isalnum() or ch in "-_" for ch in raw)


def test_digest_is_sha256_of_raw_token():
    raw, digest = TokenService().issue()

    assert digest == hashlib.sha256(raw.encode()).hexdigest()
    assert raw not in digest


def test_verify_matches_only_its_own_digest():
    tokens = TokenService()
    first = tokens.issue()
    second = tokens.issue()

    assert tokens.verify(first.raw, first.digest) is True
    assert tokens.verify(first.raw, second.digest) is False
    assert tokens.verify(None, first.digest) is False
    assert tokens.verify(first.raw, None) is False


def test_rejects_low_entropy_configuration():
    with pytest.raises(ValueError):
        TokenService(nbytes=8)


@pytest.mark.parametrize("raw", [12345, ["token"], b"token", {"t": 1}])
def test_verify_rejects_non_string_tokens(raw):
    tokens = TokenService()
    issued = tokens.issue()

    assert tokens.verify(raw, issued.digest) is False
    assert tokens.verify(issued.raw, 12345) is False
