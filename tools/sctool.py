#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Tool for sending APDUs to a reader over its secure channel"""

__version__ = "0.1.0"

import logging
import click
import okreader
from okreader.handshake import parse_channel_key
from okreader.kdf import derive_session_keys
from okreader.util import from_hex, to_hex


def _channel_key(key):
    try:
        return parse_channel_key(key)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--key'")


@ click.group()
@ click.version_option(__version__, message="%(version)s")
@ click.option(
    '--debug', 'debug',
    help='Prints APDU trace and logs phase changes.',
    is_flag=True
)
@ click.pass_context
def cli(ctx, debug):
    """Tool for sending APDUs to a reader over its secure channel"""
    ctx.obj = {'debug': debug}
    if debug:
        logging.basicConfig(level=logging.DEBUG)


@ cli.command()
@ click.argument(
    'apdus',
    nargs=-1,
    required=True,
    metavar='<apdu_hex>...'
)
@ click.option(
    '--key', 'key',
    envvar='OKREADER_KEY',
    required=True,
    help='32-byte channel key as 64 hex digits (or OKREADER_KEY).'
)
@ click.option(
    '--slot', 'key_slot',
    type=click.IntRange(0, 255),
    default=okreader.DEFAULT_KEY_SLOT,
    show_default=True,
    help='Reader key slot.'
)
@ click.option(
    '--reader', 'reader_name',
    default='',
    help='Substring of the reader name, first reader by default.'
)
@ click.pass_context
def send(ctx, apdus, key, key_slot, reader_name):
    """Establishes a secure session and sends APDUs through it"""

    _channel_key(key)
    reader = okreader.Reader(name=reader_name, debug=ctx.obj['debug'])
    try:
        with okreader.SecureChannel(reader) as channel:
            channel.establish(key, key_slot)
            for apdu in apdus:
                click.echo(f">> {apdu.upper()}")
                click.echo(f"<< {channel.send_command(apdu)}")
    except (okreader.SecureChannelError, ValueError) as exc:
        raise click.ClickException(str(exc))


@ cli.command()
@ click.option(
    '--key', 'key',
    envvar='OKREADER_KEY',
    required=True,
    help='32-byte channel key as 64 hex digits (or OKREADER_KEY).'
)
@ click.option('--host-key', 'host_key', required=True,
               help='16-byte host key as hex.')
@ click.option('--reader-key', 'reader_key', required=True,
               help='16-byte reader key as hex.')
def derive(key, host_key, reader_key):
    """Derives session keys from the channel key and exchanged keys"""

    keys = _channel_key(key)
    try:
        session_keys = derive_session_keys(
            keys.key_mac, from_hex(host_key), from_hex(reader_key))
    except ValueError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"S-ENC: {to_hex(session_keys.key_enc)}")
    click.echo(f"S-MAC: {to_hex(session_keys.key_mac)}")


if __name__ == '__main__':
    cli()
