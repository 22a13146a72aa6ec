"""Command line inspector for CDB files."""
import argparse
import sys
from itertools import islice

from constdb import __version__
from constdb.core.errors import CDBError, CDBIOError
from constdb.core.reader import Reader
from constdb.utils.config import Config


def lossy_str(data: bytes) -> str:
    """Render bytes as text, replacing what cannot be decoded."""
    return data.decode(Config.DISPLAY_ENCODING, errors='replace')


def display_item(key: bytes, value: bytes):
    print(f"{lossy_str(key)!r}: {lossy_str(value)!r}")


def parse_count(arg) -> int:
    """COUNT argument for top/tail, Config.DEFAULT_COUNT when omitted or 0."""
    if arg is None:
        return Config.DEFAULT_COUNT
    count = int(arg)
    if count < 0:
        raise ValueError("COUNT must not be negative")
    return count or Config.DEFAULT_COUNT


def handle_count(reader, args):
    """Handle COUNT command."""
    print(f"There are {len(reader)} items in the CDB at {args.file!r}")
    return 0


def handle_top(reader, args):
    """Handle TOP command: first COUNT records."""
    for key, value in islice(reader.iterate(), parse_count(args.arg)):
        display_item(key, value)
    return 0


def handle_tail(reader, args):
    """Handle TAIL command: last COUNT records."""
    count = parse_count(args.arg)
    length = len(reader)
    for key, value in islice(reader.iterate(), length - min(length, count), None):
        display_item(key, value)
    return 0


def handle_get(reader, args):
    """Handle GET command: every value under a key."""
    if args.arg is None:
        print("Error: GET requires a key", file=sys.stderr)
        return 1
    key = args.arg
    values = reader.get(key.encode(Config.DISPLAY_ENCODING))
    if not values:
        print(f"There're no values under {key!r}")
    elif len(values) == 1:
        print(f"{key!r}: {lossy_str(values[0])!r}")
    else:
        print(f"Values under key {key!r}")
        for value in values:
            print(f"    {lossy_str(value)!r}")
    return 0


def handle_all(reader, args):
    """Handle ALL command: every record."""
    if not args.yes_i_am_sure:
        print("Error: ALL prints every record, confirm with --yes-i-am-sure", file=sys.stderr)
        return 1
    for key, value in reader.iterate():
        display_item(key, value)
    return 0


def main(argv=None):
    """Main entry point for the CDB CLI."""
    parser = argparse.ArgumentParser(description='Inspect a constant database (CDB)')
    parser.add_argument('--version', action='version', version=f'constdb {__version__}')
    parser.add_argument('file', help='Path of the CDB file')
    parser.add_argument('command', choices=['count', 'top', 'tail', 'get', 'all'],
                        help='Command to execute')
    parser.add_argument('arg', nargs='?',
                        help=f'COUNT for top/tail (default: {Config.DEFAULT_COUNT}) or KEY for get')
    parser.add_argument('--yes-i-am-sure', action='store_true',
                        help='Confirm printing every record with ALL')
    args = parser.parse_args(argv)

    handlers = {
        'count': handle_count,
        'top': handle_top,
        'tail': handle_tail,
        'get': handle_get,
        'all': handle_all,
    }

    try:
        reader = Reader.open(args.file)
    except CDBIOError as e:
        print(f"Could not open file {args.file!r}: {e}", file=sys.stderr)
        return 1
    except CDBError as e:
        print(f"Could not use {args.file!r} as a readonly CDB: {e}", file=sys.stderr)
        return 1

    with reader:
        try:
            return handlers[args.command](reader, args)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except CDBError as e:
            print(f"Error reading {args.file!r}: {e}", file=sys.stderr)
            return 1


if __name__ == '__main__':
    sys.exit(main())
