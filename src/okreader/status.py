ERRORCODES = {
    b'\x63\x00': "Authentication failed",
    b'\x64\x00': "No specific diagnosis",
    b'\x65\x81': "Memory failure",
    b'\x67\x00': "Wrong length",
    b'\x68\x82': "Secure messaging not supported",
    b'\x69\x82': "Security status not satisfied",
    b'\x69\x83': "Authentication method blocked",
    b'\x69\x85': "Conditions of use not satisfied",
    b'\x69\x88': "Incorrect secure messaging data objects",
    b'\x6A\x80': "Incorrect values in command data",
    b'\x6A\x81': "Function not supported",
    b'\x6A\x82': "File or application not found",
    b'\x6A\x86': "Incorrect P1 P2",
    b'\x6A\x88': "Referenced data not found",
    b'\x6D\x00': "Invalid instruction",
    b'\x6E\x00': "Invalid class",
    b'\x6F\x00': "No precise diagnosis"
}

SUCCESS = b'\x90\x00'
SUCCESSCODES = {
    SUCCESS: "Success"
}

WARNINGCODES = {
    b'\x62\x82': "End of file reached before reading Le bytes",
    b'\x63\x10': "More data available"
}


def response_text(sw_bytes):
    """Returns response text from status bytes"""
    if sw_bytes[0] == 0x61:
        return "Response data incomplete, {} more bytes available"\
            "".format(sw_bytes[1])
    if sw_bytes[0] == 0x6C:
        return "Wrong Le, {} bytes available".format(sw_bytes[1])
    return SUCCESSCODES.get(
        sw_bytes, WARNINGCODES.get(
            sw_bytes, ERRORCODES.get(sw_bytes, "<unknown>"))
    )


def is_success(sw_bytes):
    """Checks if status bytes indicate success, the only accepted outcome"""
    return bytes(sw_bytes) == SUCCESS
