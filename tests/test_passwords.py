import pytest

from examapp.auth.passwords import burn_verification, hash_password, needs_rehash, verify_password


def test_hash_then_verify(hasher):
    digest = hash_password("secret1", hasher=hasher)
    assert digest != "secret1"
    assert digest.startswith("$argon2")
    assert verify_password(digest, "secret1", hasher=hasher)


def test_verify_rejects_other_password(hasher):
    digest = hash_password("secret1", hasher=hasher)
    assert not verify_password(digest, "secret2", hasher=hasher)
    assert not verify_password(digest, "", hasher=hasher)


def test_hash_is_salted(hasher):
    assert hash_password("secret1", hasher=hasher) != hash_password("secret1", hasher=hasher)


def test_malformed_digest_is_a_failed_verification(hasher):
    assert verify_password("not-a-digest", "secret1", hasher=hasher) is False
    assert verify_password("$argon2id$v=19$garbage", "secret1", hasher=hasher) is False
    assert verify_password("", "secret1", hasher=hasher) is False


def test_empty_password_cannot_be_hashed(hasher):
    with pytest.raises(ValueError):
        hash_password("", hasher=hasher)


def test_needs_rehash_after_cost_change(hasher):
    from examapp.auth.passwords import make_hasher

    digest = hash_password("secret1", hasher=hasher)
    assert not needs_rehash(digest, hasher=hasher)
    assert needs_rehash(digest, hasher=make_hasher(time_cost=2, memory_cost=16, parallelism=1))
    assert needs_rehash("garbage", hasher=hasher)


def test_burn_verification_returns_nothing(hasher):
    assert burn_verification("whatever", hasher=hasher) is None
