#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line front end for the Pontifex cipher.
Encrypts, decrypts, prints keystream letters or derives keys from passwords.
"""
import argparse
import logging
import sys

from deck import Deck
from errors import InternalStateError, MalformedInputError
from framing import format_key, format_message, group_letters, parse_key, parse_message
from pontifex import decrypt, encrypt, keygen, stream
from settings import DEBUG_MODE, DEFAULT_ROUNDS, CipherOptions

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BADARGS = 2
EXIT_SOFTWARE = 70

log = logging.getLogger('pontifex_cli')

EPILOG = """
Examples:
  # Encrypt stdin with a passphrase:
  echo "Do not use PC" | pontifex -p cryptonomicon

  # Decrypt a framed message with a key file:
  pontifex -d -f my.key -i message.txt

  # Print the first 10 keystream letters of the unkeyed deck:
  pontifex --identity -s 10

  # Derive a key and store it:
  pontifex --gen-key "a long passphrase" -o my.key
"""


def _count(value):
    """argparse type for non-negative integers"""
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"{value} is not a non-negative integer!")
    return int(value)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='pontifex',
        description="Implementation of Bruce Schneier's Solitaire/Pontifex cryptosystem.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )

    # Operation modes
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument('-e', '--encrypt', dest='mode', action='store_const', const='encrypt',
                       help='Encrypt input. This is the default.')
    modes.add_argument('-d', '--decrypt', dest='mode', action='store_const', const='decrypt',
                       help='Decrypt input.')
    modes.add_argument('-s', '--stream', dest='stream_length', type=_count, metavar='N',
                       help='Just print N keystream letters.')
    modes.add_argument('--gen-key', dest='gen_key', metavar='PASSWD',
                       help='Generate and print a password-based key.')

    # Key definition
    keys = parser.add_mutually_exclusive_group()
    keys.add_argument('-k', '--key', help='Symmetric key as 54 two-digit card numbers.')
    keys.add_argument('-f', '--key-file', dest='key_file', metavar='FILE', help='Read key from FILE.')
    keys.add_argument('-p', '--password', metavar='PASSWD', help='Derive the key from an alphabetic passphrase.')
    keys.add_argument('--identity', action='store_true', help='Use the unkeyed deck (testing only).')
    parser.add_argument('-j', '--move-jokers', dest='move_jokers', action='store_true',
                        help='Relocate jokers during key generation (-p or --gen-key only).')

    # I/O definition
    parser.add_argument('-i', '--input', metavar='FILE', help='Read input from FILE instead of stdin.')
    parser.add_argument('-o', '--output', metavar='FILE', help='Write output to FILE instead of stdout.')

    # Behavior
    parser.add_argument('-r', '--raw', action='store_true',
                        help='Skip the PONTIFEX MESSAGE/KEY frame on output, expect none on decrypt input.')
    parser.add_argument('-n', '--length', type=_count, metavar='N',
                        help='Only consider the first N input characters.')
    parser.add_argument('--rounds', type=int, default=DEFAULT_ROUNDS,
                        help=f'Keystream cycles per letter (default: {DEFAULT_ROUNDS}).')
    parser.add_argument('-v', '--verbose', action='count', default=0, help="Increases verbosity (up to '-vv').")
    parser.add_argument('-q', '--quiet', action='store_true', help='Reduces all log output except errors.')

    parser.set_defaults(mode='encrypt')
    return parser


def setup_logging(verbose: int = 0, quiet: bool = False):
    """Configure log output on stderr according to -v/-q and DEBUG"""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2 or DEBUG_MODE:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(format='%(levelname)s: %(message)s', stream=sys.stderr)
    logging.getLogger().setLevel(level)


def read_text(path):
    if path is None:
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def write_text(path, text):
    if path is None:
        sys.stdout.write(text)
        return
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)


def resolve_key(args) -> Deck:
    if args.move_jokers and args.password is None:
        log.warning("--move-jokers only applies to password keys, ignoring it.")

    if args.password is not None:
        log.info("Generating key from password.")
        return keygen(args.password, args.move_jokers)
    if args.key is not None:
        log.info("Using key from command line.")
        return parse_key(args.key)
    if args.key_file is not None:
        log.info("Using key file '%s'", args.key_file)
        try:
            text = read_text(args.key_file)
        except OSError as e:
            raise MalformedInputError(f"Could not open key file: {e}") from e
        if not text:
            raise MalformedInputError("Empty key file!")
        return parse_key(text)
    log.info("Using the unkeyed deck.")
    return Deck.identity()


def run(args) -> int:
    if args.gen_key is not None:
        log.info("Print-key mode")
        key = keygen(args.gen_key, args.move_jokers)
        write_text(args.output, format_key(key, raw=args.raw))
        return EXIT_OK

    options = CipherOptions(args.rounds)
    key = resolve_key(args)

    if args.stream_length is not None:
        log.info("Stream mode with %i letters", args.stream_length)
        write_text(args.output, group_letters(stream(key, args.stream_length, options)))
        return EXIT_OK

    text = read_text(args.input)
    if not text:
        log.error("Empty input, abort.")
        return EXIT_FAILURE

    if args.mode == 'encrypt':
        log.info("Encryption mode")
        ciphertext = encrypt(key, text, args.length, options)
        write_text(args.output, format_message(ciphertext, raw=args.raw))
    else:
        log.info("Decryption mode")
        message = text if args.raw else parse_message(text)
        plaintext = decrypt(key, message, args.length, options)
        write_text(args.output, group_letters(plaintext))
    return EXIT_OK


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    key_sources = [args.key, args.key_file, args.password]
    if args.gen_key is None and all(source is None for source in key_sources) and not args.identity:
        parser.error("No key was specified!")

    try:
        return run(args)
    except MalformedInputError as e:
        log.error("%s", e)
        return EXIT_BADARGS
    except InternalStateError as e:
        log.error("Internal error: %s", e)
        return EXIT_SOFTWARE
    except OSError as e:
        log.error("%s", e)
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
