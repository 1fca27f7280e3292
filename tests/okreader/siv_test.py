from binascii import unhexlify as unhex
import pytest
from okreader import crypto
from okreader.siv import *


def test_double():
    # AES-CMAC subkeys from RFC 4493: K1 = double(L), K2 = double(K1)
    L = unhex("7df76b0c1ab899b33e42f047b91b546f")
    K1 = unhex("fbeed618357133667c85e08f7236a8de")
    K2 = unhex("f7ddac306ae266ccf90bc11ee46d513b")
    assert double(L) == K1
    assert double(K1) == K2

    assert double(16 * b'\0') == 16 * b'\0'
    assert double(unhex("80000000000000000000000000000000")) == \
        unhex("00000000000000000000000000000087")
    assert double(unhex("00000000000000000000000000000001")) == \
        unhex("00000000000000000000000000000002")
    assert double(double(unhex("C0000000000000000000000000000000"))) == \
        unhex("00000000000000000000000000000189")

    with pytest.raises(ValueError):
        double(15 * b'\0')
    with pytest.raises(ValueError):
        double(17 * b'\0')


def test_xor_end():
    t = unhex("0102030405060708090A0B0C0D0E0F10")
    data = unhex("AABBCCDD") + 16 * b'\0'
    assert xor_end(data, t) == unhex("AABBCCDD") + t
    assert xor_end(16 * b'\xFF', 16 * b'\xFF') == 16 * b'\0'

    # Short data is padded and XORed into double(t)
    assert xor_end(b'', 16 * b'\0') == unhex("80000000000000000000000000000000")
    assert xor_end(unhex("0102"), 16 * b'\0') == \
        unhex("01028000000000000000000000000000")
    assert xor_end(b'', unhex("80000000000000000000000000000000")) == \
        unhex("80000000000000000000000000000087")
    assert xor_end(15 * b'\x11', 16 * b'\0') == 15 * b'\x11' + b'\x80'

    with pytest.raises(ValueError):
        xor_end(b'', 8 * b'\0')


def test_mac():
    key = unhex("2b7e151628aed2a6abf7158809cf4f3c")
    header = b'\x00'
    data = bytes(range(48))

    d = double(crypto.cmac(key, 16 * b'\0'))
    m = bytes(x ^ y for x, y in zip(crypto.cmac(key, header), d))
    expected = crypto.cmac(key, data[:32] + bytes(
        x ^ y for x, y in zip(data[32:], m)))
    tag = mac(key, header, data)
    assert tag == expected
    assert len(tag) == 16

    # Tag depends on header and every byte of data
    assert mac(key, b'\x01', data) != tag
    assert mac(key, header, data[:-1] + b'\xFF') != tag
    assert mac(key, header, b'\xFF' + data[1:]) != tag
    assert mac(key, 16 * b'\0', b'') != mac(key, 16 * b'\0', b'\x80')


def test_ctr_iv():
    assert ctr_iv(16 * b'\xFF') == unhex("FFFFFFFFFFFFFFFF7FFFFFFF7FFFFFFF")
    assert ctr_iv(16 * b'\0') == 16 * b'\0'
    tag = unhex("0102030405060708898A8B8C8D8E8F90")
    assert ctr_iv(tag) == unhex("0102030405060708098A8B8C0D8E8F90")


def test_encrypt_uses_masked_tag():
    key = unhex("2b7e151628aed2a6abf7158809cf4f3c")
    tag = unhex("f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff")
    pt = unhex("6bc1bee22e409f96e93d7e117393172a")
    assert encrypt(key, tag, pt) == crypto.aes_ctr(key, ctr_iv(tag), pt)
    assert encrypt(key, tag, pt) != crypto.aes_ctr(key, tag, pt)


def test_round_trip():
    key = unhex("000102030405060708090A0B0C0D0E0F")
    tag = unhex("C0C1C2C3C4C5C6C7C8C9CACBCCCDCECF")
    data = bytes(range(256)) + b'\x42'
    for n in range(0, 257):
        enc = encrypt(key, tag, data[:n])
        assert len(enc) == n
        assert decrypt(key, tag, enc) == data[:n]
    assert encrypt(key, tag, b'') == b''
