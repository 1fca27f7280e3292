import os
import okreader


def reader_info(channel: okreader.SecureChannel) -> dict:
    """Read reader information over the secure channel

    :param channel: established secure channel
    :return: dictionary of response data per requested item
    """
    info = {}
    # GET DATA for card UID, answered by the reader for the card in field
    info["uid"] = channel.send_command("FFCA000000")
    # GET DATA for historical bytes of the card
    info["historical bytes"] = channel.send_command("FFCA010000")
    for name, value in info.items():
        print("%s: %s" % (name, value))
    return info


if __name__ == '__main__':
    # Opens a secure session with the first available reader and reads
    # card information through it. Channel key is taken from OKREADER_KEY,
    # the reader default key is used otherwise.

    key = os.environ.get("OKREADER_KEY", 32 * "00")
    reader = okreader.Reader(debug=True)
    with okreader.SecureChannel(reader) as channel:
        channel.establish(key, okreader.DEFAULT_KEY_SLOT)
        print("Session state:", channel.state)
        reader_info(channel)
