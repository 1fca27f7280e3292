"""okreader - secure channel to HID OMNIKEY / AViatoR smart card readers"""

from . import crypto, siv, kdf, counter, handshake, status
from .channel import SecureChannel, DEFAULT_KEY_SLOT
from .reader import Reader, Disposition, get_reader
from .errors import (SecureChannelError, TransportError, ISOException,
                     IntegrityError, MacMismatchError, NonceMismatchError,
                     ChannelNotEstablished)

__version__ = '0.1.0'
