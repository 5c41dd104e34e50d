"""Runs the quill interpreter on a .qu file, or in command-line mode. Also uses the error handling context manager.
Called from the quill executable script.

Python version must be >=3.8: error handling requires that dicts are insertion-ordered, and termcolor needs 3.8.
"""

import argparse
import sys

from quill.lang.error import ErrorHandler, GenericException
from quill.lang.session import Session
from quill.lang.shell import Shell


def parse_defines(defines):
    """Turns NAME=VALUE strings into a bindings dict. Numeric values become numbers, anything else a string."""
    bindings = {}
    for define in defines:
        name, sep, value = define.partition("=")
        if not sep or not name:
            raise GenericException("'{}' is not of the form NAME=VALUE", define, diagnosis=False)
        try:
            bindings[name] = float(value)
        except ValueError:
            bindings[name] = value
    return bindings


def main(argv=None):
    """Runs quill interpreter. Called from quill executable script."""
    assert sys.version_info >= (3, 8), "quill cannot be run with python < 3.8"

    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="quill")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("-D", "--define", help="bind NAME to VALUE before running", action="append", default=[],
                            metavar="NAME=VALUE")
        parser.add_argument("--recursion-limit", help="python recursion limit (bounds quill call depth)", type=int)
        args = parser.parse_args(argv)

        bindings = parse_defines(args.define)
        if args.recursion_limit:
            sys.setrecursionlimit(args.recursion_limit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, bindings=bindings)
            sess.run()

            if sess.results:
                print(sess.results[-1].inspect())

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, bindings=bindings)).cmdloop()


if __name__ == "__main__":
    main()
