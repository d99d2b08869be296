"""Print an outline of the messages in a dbc file, one class per message
with a field for each of its signals.

Usage: dbcsignals.py [-v] [--check [--strict]] file.dbc
"""
#
# Copyright 2024 Einar Halvorsen
#
# License: GPL-3.0-or-later
#
import argparse
import logging
import sys
import warnings

import candbc


def custom_formatwarning(msg, *args, **kwargs):
    return str(args[0].__name__) + ": " + str(msg) + '\n'


def outline(document):
    """Return the outline of all messages in document as a string.

    """
    string = ""
    for message in document.messages:
        string += "@dataclass\nclass {}:\n".format(message.name)
        string += "    \"\"\"BO_ {}, {} bytes\"\"\"\n".format(message.id,
                                                           message.size)
        for signal in message.signals:
            string += "    {}: float\n".format(signal.name.lower())
        string += "\n"
    return string


def main(argv=None):
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument('file', help="dbc file to read")
    ap.add_argument('-v', '--verbose', action='store_true',
                    help="log parsing progress")
    ap.add_argument('--check', action='store_true',
                    help="report references that do not resolve")
    ap.add_argument('--strict', action='store_true',
                    help="with --check, stop at the first such reference")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose
                        else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    warnings.formatwarning = custom_formatwarning

    with open(args.file, "rb") as fp:
        buffer = fp.read()
    try:
        document = candbc.parse(buffer)
        if args.check:
            candbc.check_references(document, strict=args.strict)
    except (candbc.ParseError, candbc.Incomplete,
            candbc.DatabaseError) as e:
        print("{}: {}".format(type(e).__name__, e), file=sys.stderr)
        return 1
    sys.stdout.write(outline(document))
    return 0


if __name__ == '__main__':
    sys.exit(main())
