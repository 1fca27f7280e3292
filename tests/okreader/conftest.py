import os
import pytest
from okreader import commands, siv
from okreader.counter import SessionCounter
from okreader.handshake import parse_channel_key
from okreader.kdf import derive_session_keys
from okreader.reader import Disposition
from okreader.util import from_hex, to_hex

# Channel key 000102..1F
TEST_KEY = bytes(range(32)).hex().upper()

SUCCESS = "9000"


class FakeReader:
    """Reader side of the secure session protocol"""

    def __init__(self, key=TEST_KEY, key_slot=0, reader_nonce=None,
                 reader_key=None, handler=None):
        self.keys = parse_channel_key(key)
        self.key_slot = key_slot
        self.reader_nonce = reader_nonce or os.urandom(16)
        self.reader_key = reader_key or os.urandom(16)
        # Plain command -> plain response, echo by default
        self.handler = handler or (lambda apdu: apdu)
        self.is_connected = False
        self.exclusive = None
        self.dispositions = []
        self.sent = []
        self.commands = []
        self.session_keys = None
        self.counter = None
        self.host_key = None
        self.host_nonce = None
        # Status word override per P1 of the command
        self.status_override = {}
        # Callable applied to response data before status bytes, per P1
        self.tamper = {}
        # Values echoed in reader cryptogram instead of the right ones
        self.echo_reader_nonce = None
        self.echo_host_nonce = None
        # Extra counter increments before answering a secured command
        self.extra_increments = 0

    @property
    def name(self):
        return "Fake reader"

    def connect(self, exclusive=True):
        self.exclusive = exclusive
        self.is_connected = True
        return True

    def disconnect(self, disposition=Disposition.LEAVE):
        self.dispositions.append(disposition)
        self.is_connected = False

    def _respond(self, p1, data=b''):
        if p1 in self.status_override:
            return self.status_override[p1]
        if p1 in self.tamper and data:
            data = self.tamper[p1](data)
        return to_hex(data) + SUCCESS

    def transmit(self, apdu_hex):
        assert self.is_connected
        self.sent.append(apdu_hex)
        apdu = from_hex(apdu_hex)
        if apdu[:2] != commands.CLA_INS:
            return "6E00"
        p1 = apdu[commands.OFF_P1]
        data = b''
        if len(apdu) > commands.OFF_DATA:
            data = apdu[commands.OFF_DATA:
                        commands.OFF_DATA + apdu[commands.OFF_LC]]
        if p1 == 0x00:
            assert apdu[commands.OFF_P2] == self.key_slot
            return self._respond(p1, self.reader_nonce)
        if p1 == 0x01:
            cryptogram = self._mutual_authenticate(data)
            if cryptogram is None:
                return "6300"
            return self._respond(p1, cryptogram)
        if p1 == 0x02:
            return self._secure_message(data)
        if p1 == 0x03:
            self.session_keys = None
            self.counter = None
            return self._respond(p1)
        return "6A86"

    def _mutual_authenticate(self, data):
        if len(data) != 64:
            return None
        enc, mac = data[:48], data[48:]
        plain = siv.decrypt(self.keys.key_enc, mac, enc)
        if siv.mac(self.keys.key_mac, bytes([self.key_slot]), plain) != mac:
            return None
        if plain[16:32] != self.reader_nonce:
            return None
        self.host_nonce = plain[:16]
        self.host_key = plain[32:]

        plain2 = ((self.echo_reader_nonce or self.reader_nonce) +
                  (self.echo_host_nonce or self.host_nonce) + self.reader_key)
        mac2 = siv.mac(self.keys.key_mac, bytes([self.key_slot]), plain2)
        enc2 = siv.encrypt(self.keys.key_enc, mac2, plain2)
        self.session_keys = derive_session_keys(
            self.keys.key_mac, self.host_key, self.reader_key)
        self.counter = SessionCounter(self.host_nonce, self.reader_nonce)
        return enc2 + mac2

    def _secure_message(self, data):
        header = self.counter.increment()
        enc, mac = data[:-16], data[-16:]
        plain = siv.decrypt(self.session_keys.key_enc, mac, enc)
        valid = siv.mac(self.session_keys.key_mac, header, plain) == mac
        for _ in range(self.extra_increments):
            self.counter.increment()
        header = self.counter.increment()
        if not valid:
            return "6988"
        self.commands.append(plain)
        response = self.handler(plain)
        mac2 = siv.mac(self.session_keys.key_mac, header, response)
        enc2 = siv.encrypt(self.session_keys.key_enc, mac2, response)
        return self._respond(0x02, enc2 + mac2)


@pytest.fixture
def fake_reader():
    return FakeReader(reader_nonce=16 * b'\xAA')


@pytest.fixture
def reader_factory():
    return FakeReader


@pytest.fixture
def channel_key():
    return TEST_KEY
