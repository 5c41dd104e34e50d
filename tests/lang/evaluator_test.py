import unittest

from quill.lang.environment import Environment
from quill.lang.error import EvalError
from quill.lang.evaluator import Evaluator, Returning, evaluate
from quill.lang.values import NULL, Function, Number, String
from quill.pure.parser import parse
from quill.pure.tree import ExpressionStmt, Num, Return


def run(source, env=None):
    """Parses and evaluates source in env (a fresh Environment if None)."""
    program = parse(source)
    assert not program.errors, [error.plain for error in program.errors]
    return evaluate(program, env if env is not None else Environment())


class EvaluatorTestCase(unittest.TestCase):

    def test_arithmetic(self):
        should_pass = {
            "let a = 5": 5,
            "5 + 6 * 2": 17,
            "10 / 4": 2.5,
            "-5 - 5": -10,
            "(1 + 2) * 3": 9,
            "2 * -3": -6,
            "1 - 2 - 3": -4,
            "": None,
        }
        for case, result in should_pass.items():
            expected = NULL if result is None else Number(result)
            self.assertEqual(expected, run(case), case)

    def test_booleans(self):
        should_pass = {
            "true": 1, "false": 0, "!0": 1, "!5": 0, "!!3": 1, "!true": 0,
            "1 < 2": 1, "2 <= 1": 0, "2 >= 2": 1, "3 > 4": 0,
            "3 == 3": 1, "3 != 3": 0, "true == 1": 1, "(1 < 2) == true": 1,
        }
        for case, result in should_pass.items():
            self.assertEqual(Number(result), run(case), case)

    def test_if(self):
        should_pass = {
            "let a = 5;\nif(a - 2) {\n 6\n}": Number(6),
            "if (0) { 1 } else { 2 }": Number(2),
            "if (false) { 1 }": NULL,
            "if (0) { 1 } else if (1) { 2 } else { 3 }": Number(2),
            "if 1 - 1 { 1 } else if 0 { 2 } else { 3 }": Number(3),
            "if (1) {}": NULL,
            "if (1) { 1; 2 }": Number(2),
        }
        for case, result in should_pass.items():
            self.assertEqual(result, run(case), case)

    def test_functions(self):
        should_pass = {
            "let f = fn(x) { x * 2 }; f(21)": Number(42),
            "let adder = fn(x) { fn(y) { x + y } }; let add2 = adder(2); add2(3)": Number(5),
            "let fact = fn(n) { if (n < 2) { return 1 } n * fact(n - 1) }; fact(5)": Number(120),
            "fn() {}()": NULL,
            "let f = fn() { return }; f()": NULL,
            "let f = fn() { return 1; undefined_thing }; f()": Number(1),
            "let x = 1; let f = fn() { x }; f()": Number(1),
            "let apply = fn(f, x) { f(x) }; apply(fn(y) { y + 1 }, 1)": Number(2),
            "fn(a, b) { a - b }(10, 3)": Number(7),
        }
        for case, result in should_pass.items():
            self.assertEqual(result, run(case), case)

    def test_closures_capture_by_reference(self):
        env = Environment()
        run("let get = fn() { later }", env)
        run("let later = 7", env)

        self.assertEqual(Number(7), run("get()", env))

    def test_return_threading(self):
        env = Environment()
        run("let f = fn(x) { if (x > 0) { if (x > 10) { return 2 } return 1 } return 0 }", env)

        cases = {"f(20)": Number(2), "f(5)": Number(1), "f(-1)": Number(0)}
        for case, result in cases.items():
            self.assertEqual(result, run(case, env), case)

    def test_return_from_let_initializer(self):
        env = Environment()
        run("let f = fn(x) { let y = if (x) { return 7 }; 8 }", env)

        self.assertEqual(Number(7), run("f(1)", env))
        self.assertEqual(Number(8), run("f(0)", env))

    def test_eval_block(self):
        evaluator = Evaluator()
        block = (Return(Num(3.0)), ExpressionStmt(Num(4.0)))

        self.assertEqual(Returning(Number(3)), evaluator.eval_block(block, Environment().child()))
        self.assertEqual(Number(3), evaluator.eval_block(block, Environment().child(in_function=True)))
        self.assertEqual(Number(4), evaluator.eval_block(block[1:], Environment()))

    def test_errors(self):
        should_raise = {
            "x": "undefined variable 'x'",
            "let a = 1; let a = 2": "'a' is already initialized",
            "let a = 1; let a = b": "'a' is already initialized",
            "return 5": "'return' outside function",
            "if (1) { return 5 }": "'return' outside function",
            "if (1) { if (1) { return } }": "'return' outside function",
            "let f = fn() {}; -f": "invalid operand for '-': function",
            "!fn() {}": "invalid operand for '!': function",
            "1 + fn() {}": "invalid operands for '+': number and function",
            "let n; n + 1": "invalid operands for '+': null and number",
            "let n; 1 - n": "invalid operands for '-': number and null",
            "1 / 0": "division by zero: '1 / 0'",
            "let n; n > 1": "invalid operands for '>': null and number",
            "let f = fn(a) { a }; f()": "'<fn f(a)>' expects 1 argument(s), got 0",
            "fn() { 1 }(2)": "'<fn ()>' expects 0 argument(s), got 1",
            "5(1)": "'5' is not a function: number",
            "let f = fn() { 1 + if (1) { return 2 } }; f()":
                "invalid operand for '+': a return cannot be used as a value",
            "if (1) { let b = 2 }; b": "undefined variable 'b'",
            "let f = fn(a) { let a = 1 }; f(0)": "'a' is already initialized",
        }
        for case, msg in should_raise.items():
            with self.assertRaises(EvalError, msg=case) as context:
                run(case)
            self.assertEqual(msg, context.exception.plain, case)

    def test_recursion_limit(self):
        env = Environment()
        with self.assertRaises(EvalError) as context:
            run("let f = fn(n) { f(n + 1) }; f(0)", env)

        self.assertEqual("maximum recursion depth exceeded", context.exception.plain)
        self.assertEqual(Number(3), run("1 + 2", env))

    def test_redeclaration_keeps_first_binding(self):
        env = Environment()
        self.assertRaises(EvalError, run, "let a = 1; let a = 2", env)
        self.assertEqual(Number(1), run("a", env))

    def test_partial_commit(self):
        env = Environment()
        self.assertRaises(EvalError, run, "let a = 1; let b = c; let d = 4", env)

        self.assertIn("a", env)
        self.assertNotIn("b", env)
        self.assertNotIn("d", env)

    def test_scoping(self):
        env = Environment()
        run("let a = 1", env)

        self.assertEqual(Number(2), run("if (1) { let a = 2; a }", env))
        self.assertEqual(Number(1), run("a", env))

        self.assertEqual(Number(2), run("if (a) { let c = a + 1; c }", env))
        self.assertEqual(["a"], list(env.variables))

        self.assertEqual(Number(1), run("if (a) { 5 } else { 6 } - 4", env))

    def test_persistence(self):
        env = Environment()
        run("let a = 1", env)
        self.assertEqual(Number(2), run("a + 1", env))

    def test_strings(self):
        env = Environment()
        env.define("s", String("ab"))

        should_pass = {
            "s + 1": String("ab1"),
            "1 + s": String("1ab"),
            "s + s": String("abab"),
            "2.5 + s": String("2.5ab"),
            "s == s": Number(1),
            "s == 1": Number(0),
            "s != 1": Number(1),
            "s < s + 1": Number(1),
            "if (s) { 1 } else { 2 }": Number(1),
        }
        for case, result in should_pass.items():
            self.assertEqual(result, run(case, env), case)

        should_raise = ["s - 1", "s * 2", "-s", "!s", "s > 1"]
        for case in should_raise:
            self.assertRaises(EvalError, run, case, env)

    def test_function_values(self):
        env = Environment()
        f = run("let f = fn(a, b) { a }; f", env)

        self.assertIsInstance(f, Function)
        self.assertEqual("f", f.name)
        self.assertEqual("<fn f(a, b)>", f.inspect())
        self.assertIs(env, f.env)

        self.assertEqual(Number(1), run("f == f", env))
        self.assertEqual(Number(0), run("f == fn(a, b) { a }", env))


if __name__ == '__main__':
    unittest.main()
