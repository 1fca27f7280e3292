"""PC/SC transport to a reader, built on pyscard"""

import logging
from smartcard.System import readers
from smartcard.CardConnectionDecorator import CardConnectionDecorator
from smartcard.Exceptions import SmartcardException
from smartcard.scard import (SCARD_SHARE_EXCLUSIVE, SCARD_SHARE_SHARED,
                             SCARD_LEAVE_CARD, SCARD_RESET_CARD)
from .errors import TransportError
from .util import to_hex, from_hex

logger = logging.getLogger(__name__)


class Disposition:
    """Action taken on the card when disconnecting"""
    LEAVE = SCARD_LEAVE_CARD
    RESET = SCARD_RESET_CARD


def get_reader(name=""):
    """Return first found reader whose name contains the given string."""
    try:
        rarr = [r for r in readers() if name in str(r)]
    except SmartcardException as exc:
        raise TransportError("Unable to list readers") from exc
    if len(rarr) == 0:
        raise TransportError("Reader not found")
    return rarr[0]


class Reader:
    """Hex string APDU transport over a pyscard connection.

    Either a pyscard reader, a reader name substring or an existing
    connection object may be given; the first matching reader is used
    when none is.
    """

    def __init__(self, reader=None, name="", connection=None, debug=False):
        self._reader = reader
        self._name = name
        self._connection = connection
        self._connected = False
        self.debug = debug

    @property
    def name(self) -> str:
        if self._reader is not None:
            return str(self._reader)
        return self._name

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self, exclusive=True):
        """Connect to the reader, exclusively unless told otherwise."""
        if self._connection is None:
            if self._reader is None:
                self._reader = get_reader(self._name)
            self._connection = self._reader.createConnection()
        mode = SCARD_SHARE_EXCLUSIVE if exclusive else SCARD_SHARE_SHARED
        try:
            self._connection.connect(mode=mode)
        except SmartcardException as exc:
            raise TransportError("Unable to connect to reader: %s" %
                                 self.name) from exc
        self._connected = True
        logger.debug("Connected to %s (exclusive=%s)", self.name, exclusive)
        return self._connected

    def disconnect(self, disposition=Disposition.LEAVE):
        """Disconnect from the reader, does nothing if not connected."""
        if not self._connected:
            return
        self._connected = False
        # Decorators delegate disconnect, the disposition must reach the
        # innermost connection
        self._card_connection().disposition = disposition
        try:
            self._connection.disconnect()
        except SmartcardException as exc:
            raise TransportError("Unable to disconnect from reader: %s" %
                                 self.name) from exc
        logger.debug("Disconnected from %s", self.name)

    def _card_connection(self):
        conn = self._connection
        while isinstance(conn, CardConnectionDecorator):
            conn = conn.component
        return conn

    def transmit(self, apdu: str) -> str:
        """Send hex APDU returning hex response ending with status bytes"""
        if not self._connected:
            raise TransportError("Reader is not connected")
        if self.debug:
            print(">>", apdu)
        logger.debug(">> %s", apdu)
        try:
            data, sw1, sw2 = self._connection.transmit(list(from_hex(apdu)))
        except SmartcardException as exc:
            raise TransportError("Transmission failed") from exc
        response = to_hex(bytes(data) + bytes([sw1, sw2]))
        if self.debug:
            print("<<", response)
        logger.debug("<< %s", response)
        return response
