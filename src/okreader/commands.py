"""Reader secure session commands"""

# Class and instruction of all secure session commands
CLA_INS = b'\xFF\x72'
# Request reader challenge, P2 is the key slot
GET_CHALLENGE = CLA_INS + b'\x00'
# Host authentication carrying encrypted nonces and host key
MUTUAL_AUTHENTICATE = CLA_INS + b'\x01\x00'
# Wrapped APDU sent over an established session
SECURE_MESSAGE = CLA_INS + b'\x02\x00'
# Close the session
TERMINATE = CLA_INS + b'\x03\x00\x00'

# Offset of the P1 byte within APDU
OFF_P1 = 2
# Offset of the P2 byte within APDU
OFF_P2 = 3
# Offset of the Lc byte within APDU
OFF_LC = 4
# Offset of the Data field within APDU
OFF_DATA = 5

# Maximum value of the one-byte Lc field
LC_MAX = 255


def get_challenge(key_slot: int) -> bytes:
    """GET CHALLENGE for the key slot"""
    return GET_CHALLENGE + bytes([key_slot, 0x00])


def with_data(header: bytes, data: bytes) -> bytes:
    """Appends Lc and data to a 4-byte command header"""
    if len(data) > LC_MAX:
        raise ValueError("Command data too long")
    return header + bytes([len(data)]) + bytes(data)
