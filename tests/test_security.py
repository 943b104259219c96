import pytest

from gametasks.security import KEY_LENGTH, SALT_BYTES, hash_password, verify_password


def test_hash_format():
    stored = hash_password("secret1")
    key_hex, salt_hex = stored.split(".")

    assert len(key_hex) == KEY_LENGTH * 2
    assert len(salt_hex) == SALT_BYTES * 2
    assert "secret1" not in stored


def test_hash_uses_fresh_salt():
    assert hash_password("secret1") != hash_password("secret1")


@pytest.mark.parametrize("password", ["secret1", "", "çäö-ünïcode", "x" * 200])
def test_verify_accepts_same_password(password):
    assert verify_password(password, hash_password(password)) is True


@pytest.mark.parametrize(
    "password, other",
    [("secret1", "secret2"), ("secret1", "Secret1"), ("abc", "abc ")],
)
def test_verify_rejects_other_password(password, other):
    assert verify_password(password, hash_password(other)) is False


@pytest.mark.parametrize(
    "stored",
    ["", "no-dot-here", "zz.zz", "abcd.abcd", "a.b.c"],
)
def test_verify_raises_on_malformed_credential(stored):
    with pytest.raises(ValueError):
        verify_password("secret1", stored)
