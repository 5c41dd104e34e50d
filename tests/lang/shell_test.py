import io
import unittest
from contextlib import redirect_stdout

from quill.lang.error import ErrorHandler
from quill.lang.session import Session
from quill.lang.shell import Shell
from quill.lang.values import Number


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, cmd_line=True))

    def feed(self, *lines):
        """Sends lines to the shell, returning everything it printed."""
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            for line in lines:
                self.shell.onecmd(line)
        return stdout.getvalue()

    def test_values(self):
        cases = {
            "5 + 6 * 2": "17\n",
            "10 / 4": "2.5\n",
            "1 < 2": "1\n",
            "let f = fn(a) { a }": "<fn f(a)>\n",
            "let n": "null\n",
            "(1 + 2)": "3\n",
            "# nothing here": "",
        }
        for case, output in cases.items():
            self.assertEqual(output, self.feed(case), case)

    def test_persistence(self):
        self.assertEqual("1\n2\n", self.feed("let a = 1", "a + 1"))
        self.assertEqual(Number(1), self.shell.sess.environment.get("a"))

    def test_continuation(self):
        self.assertEqual("", self.feed("let add = fn(a, b) {"))
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)

        self.assertEqual("", self.feed("  a + b"))
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)

        self.assertEqual("<fn add(a, b)>\n", self.feed("}"))
        self.assertEqual(">> ", self.shell.prompt)
        self.assertEqual("3\n", self.feed("add(1, 2)"))

    def test_continuation_commands(self):
        self.feed("let help = 4", "let exit = 2", "let f = fn(x) {")

        with redirect_stdout(io.StringIO()):
            self.assertFalse(self.shell.onecmd("exit * x"))
            self.assertFalse(self.shell.onecmd("  + help"))
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)

        self.assertEqual("<fn f(x)>\n", self.feed("}"))
        self.assertEqual("10\n", self.feed("f(3)"))

    def test_errors(self):
        output = self.feed("undefined_name")
        self.assertIn("error: ", output)
        self.assertIn("undefined variable", output)

        output = self.feed("let 5")
        self.assertIn("expected identifier", output)

        self.assertEqual("2\n", self.feed("1 + 1"))
        self.assertFalse(self.shell.sess.to_exec)

    def test_commands(self):
        self.assertIn("Welcome", self.feed("help"))
        self.assertEqual("", self.feed(""))

        with redirect_stdout(io.StringIO()):
            self.assertTrue(self.shell.onecmd("exit"))
            self.assertTrue(self.shell.onecmd("EOF"))


if __name__ == '__main__':
    unittest.main()
