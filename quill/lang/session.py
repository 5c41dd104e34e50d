"""Session control for the quill language. A Session owns the single top-level Environment that every chunk of source
is run against, so bindings made by one chunk are visible to the next, either in command-line mode or file
interpretation mode.

A chunk is one line of input, extended over following lines for as long as it has more "(" or "{" open than closed.
Comments start with "#" and run to the end of the line.
"""

from quill.lang.environment import Environment
from quill.lang.error import GenericException, ParseErrors
from quill.lang.evaluator import Evaluator
from quill.lang.values import from_python
from quill.pure.parser import parse


class Session:
    """Governs a quill session, with control over its top-level scope."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = "#"

    def __init__(self, error_handler, path, cmd_line, bindings=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.environment = Environment()  # persistent top-level scope
        self.evaluator = Evaluator()
        self.to_exec = []   # queue of (line num, source, Program) to evaluate
        self.results = []   # value of every chunk run so far

        if self.cmd_line:
            self.error_handler.fatal = False

        if bindings:
            for name, value in bindings.items():
                self.bind(name, value)

        if path != Session.SH_FILE:
            chunks = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, chunks)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for chunk in chunks:
                self.add(*chunk)

        elif not cmd_line:
            raise GenericException("'{}' is a reserved filename", Session.SH_FILE)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, chunks=None):
        """Preprocesses a line from a file or command-line. In command-line mode, chunks can be ignored (used to keep
        track of a file's chunks as (source, first line num) pairs), but the returned add_to_prev will indicate whether
        a line continuation is necessary. Returns updated value of line and add_to_prev. Must be called before add.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments
        line = line.rstrip()

        if chunks is not None:
            if line and not add_to_prev:
                chunks.append((line, line_num))
            elif add_to_prev:
                source, start = chunks.pop()
                line = source + "\n" + line
                chunks.append((line, start))

        return line, Session.is_open(line)

    @staticmethod
    def is_open(source):
        """Whether source has more brackets opened than closed, and so continues on the next line."""
        return source.count("(") + source.count("{") > source.count(")") + source.count("}")

    def bind(self, name, value):
        """Binds a host value (number, str, None or quill Value) to name in the top-level scope."""
        try:
            value = from_python(value)
        except TypeError as error:
            raise GenericException("cannot bind '{}': {}", [name, error], diagnosis=False)
        return self.environment.define(name, value)

    def add(self, source, line_num=0):
        """Parses a chunk of source and queues it. Evaluation is delayed until run is called. A chunk with any parse
        error is never queued: ParseErrors holding all of them is raised instead.
        """
        if not source.strip():
            raise ValueError("chunk cannot be empty")

        self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

        program = parse(source)
        if program.errors:
            raise ParseErrors(program.errors, source)
        self.to_exec.append((line_num, source, program))

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs every queued chunk, in order, against the session's Environment, appending each chunk's value to
        self.results. The first error stops the run and drops the rest of the queue; bindings already made stay.
        """
        while self.to_exec:
            line_num, source, program = self.to_exec.pop(0)
            self.error_handler.register_line(self.path, source, line_num)

            try:
                self.results.append(self.evaluator.eval(program, self.environment))
            except GenericException:
                self.to_exec.clear()
                raise

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the most recent result."""
        return self.results.pop()
