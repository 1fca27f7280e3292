import pytest
from okreader.secret import *


def test_secret_bytes():
    secret = SecretBytes(b'\x01\x02\x03')
    assert len(secret) == 3
    assert bytes(secret) == b'\x01\x02\x03'
    assert not secret.wiped
    assert "\\x01" not in repr(secret) and "3 bytes" in repr(secret)

    secret.wipe()
    assert secret.wiped
    assert bytes(secret) == b''
    # Wiping twice is harmless
    secret.wipe()


def test_wipe_on_exit():
    with SecretBytes(b'\xFF' * 16) as secret:
        assert bytes(secret) == b'\xFF' * 16
    assert secret.wiped

    with pytest.raises(KeyError):
        with SecretBytes(b'\xFF' * 16) as secret:
            raise KeyError()
    assert secret.wiped


def test_wipe_many():
    a, b = SecretBytes(b'\x01'), SecretBytes(b'\x02')
    wipe(a, None, b)
    assert a.wiped and b.wiped
