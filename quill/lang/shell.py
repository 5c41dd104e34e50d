"""Handles interactive/command-line mode for the quill interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """quill interpreter shell."""
    intro = "quill interpreter :: Python backend\nType 'help' for more information."
    prompt = ">> "
    secondary_prompt = ".. "  # used for line continuations
    _tmp_prompt = ">> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def onecmd(self, line):
        """Continuation lines are always quill source, even if they start with a command name."""
        if self._tmp_line:
            return self.default(line)
        return super().onecmd(line)

    def default(self, line):
        """Executes arbitrary quill source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if self._tmp_line:
                line = self._tmp_line + "\n" + line
            line, add_to_prev = self.sess.preprocess_line(line, self.line_num, bool(self._tmp_line))

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                try:
                    self.sess.add(line, self.line_num)
                except ValueError:
                    return  # if line is empty, terminate

                self.sess.run()

                if self.sess.results:
                    print(self.sess.pop().inspect())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the quill interpreter!\n\n"
              "quill is a small expression language with numbers, closures and if/else.\n"
              "Every line is evaluated and its value printed; bindings persist between lines.\n\n"
              "Try 'let add = fn(a, b) { a + b }', then 'add(1, 2)'. Lines with unclosed\n"
              "brackets continue on the next line. Type 'exit' to quit.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
