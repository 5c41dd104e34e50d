"""Error handling for the quill language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Taxonomy:
    - ParseError: unexpected token, missing delimiter, bad parameter list. Carries the offending token's span.
    - ParseErrors: every ParseError found in one chunk of source, reported together.
    - EvalError: redeclaration, undefined variable, operator type mismatch, bad call, return outside function.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a quill error. msg is a str.format template whose
    fields are filled (and bolded) with exprs. If source is given, start/end index the offending span of source and
    are used to display a diagnosis; otherwise the first expr is treated as the offending expr.
    """

    def __init__(self, msg, exprs=None, source=None, start=0, end=-1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        self.plain = msg.format(*exprs)  # uncolored message, also used as the exception's args
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = source if source is not None else exprs[0]
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain)


class ParseError(GenericException):
    """Error found while parsing. token is the offending Token, source the text being parsed."""

    def __init__(self, msg, token, source, exprs=None):
        super().__init__(msg, exprs if exprs is not None else token.literal, source, token.start, token.end)
        self.token = token


class ParseErrors(GenericException):
    """Every ParseError from a single chunk of source. Raised by Session so that a chunk is never partially run."""

    def __init__(self, errors, source):
        super().__init__("'{}' could not be parsed", source, diagnosis=False)
        self.errors = list(errors)


class EvalError(GenericException):
    """Error raised while evaluating a program. Evaluation errors carry no source span."""

    def __init__(self, msg, exprs=None, internal=False):
        super().__init__(msg, exprs, diagnosis=False, internal=internal)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom quill errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error):
        """Returns the source line holding the offending part of error.expr, highlighted and underlined."""
        line_start = error.expr.rfind("\n", 0, error.start) + 1
        line_end = error.expr.find("\n", error.start)
        if line_end == -1:
            line_end = len(error.expr)

        line = error.expr[line_start:line_end]
        start = error.start - line_start
        end = max(min(error.end, line_end) - line_start, start + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def format(self, error):
        """Returns the full report for error: traceback (if more than one line is registered), message, diagnosis."""
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        reported = error.errors if isinstance(error, ParseErrors) else [error]
        for idx, sub_error in enumerate(reported):
            if idx:
                error_msg += "\n"
            if sub_error.internal:
                error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

            error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + sub_error.msg

            if not sub_error.internal and sub_error.expr and sub_error.diagnosis:
                error_msg += "\n" + ErrorHandler.diagnose(sub_error)

        return error_msg

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        print(self.format(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {file: (None, None) for file in self.traceback}  # reset traceback (no need if fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
