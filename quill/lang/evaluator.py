"""Tree-walking evaluator for the quill language.

A program is evaluated statement by statement against an Environment; its value is the value of its last statement.
Blocks (if-branches and function bodies) are evaluated by eval_block, which differs from top-level evaluation only in
what a return does. A return produces a Returning signal instead of a value. Each block stops as soon as it sees one
and either unwraps it (if the block's scope is a function call's scope) or hands it up unchanged, so a return nested
in any number of if-blocks ends the enclosing function call. At top level there is no function to consume the signal,
so a return is an error there.
"""

import operator
from dataclasses import dataclass

from quill.lang.error import EvalError
from quill.lang.values import NULL, Function, Null, Number, String, Value, boolean, is_truthy
from quill.pure.tree import Bool, Call, ExpressionStmt, Fn, Group, Identifier, If, Infix, Let, Num, Prefix, Return


@dataclass(frozen=True)
class Returning:
    """A return in flight. Not a Value: it can only travel up through blocks until a function call consumes it."""
    value: Value


class Evaluator:
    """Evaluates Programs. Holds no state of its own: all state lives in the Environments it is given."""

    def __init__(self):
        self._expressions = {
            Prefix: self._eval_prefix,
            Infix: self._eval_infix,
            If: self._eval_if,
            Fn: self._eval_fn,
            Call: self._eval_call,
            Group: self._eval_group,
            Identifier: self._eval_identifier,
            Num: self._eval_num,
            Bool: self._eval_bool,
        }

        self._operators = {
            "+": self._add,
            "-": self._arithmetic(operator.sub),
            "*": self._arithmetic(operator.mul),
            "/": self._divide,
            "==": self._equals,
            "!=": lambda op, left, right: boolean(not is_truthy(self._equals(op, left, right))),
            ">": self._comparison(operator.gt),
            ">=": self._comparison(operator.ge),
            "<": self._comparison(operator.lt),
            "<=": self._comparison(operator.le),
        }

    def eval(self, program, env):
        """Evaluates program in env and returns the value of its last statement (Null if it has none). Raises
        EvalError on the first failure; bindings made by earlier statements are kept.
        """
        try:
            result = NULL
            for statement in program.statements:
                if isinstance(statement, Return):
                    raise EvalError("'{}' outside function", "return")

                result = self._eval_statement(statement, env)
                if isinstance(result, Returning):
                    raise EvalError("'{}' outside function", "return")
            return result

        except RecursionError:
            raise EvalError("maximum recursion depth exceeded") from None

    def eval_block(self, statements, env):
        """Evaluates the statements of a block. Returns a Value, or a Returning if a return happened and env is not a
        function call's scope.
        """
        result = NULL
        for statement in statements:
            if isinstance(statement, Return):
                result = self._eval_return(statement, env)
            else:
                result = self._eval_statement(statement, env)

            if isinstance(result, Returning):
                return result.value if env.in_function else result

        return result

    def eval_expression(self, expr, env):
        handler = self._expressions.get(type(expr))
        if handler is None:
            raise EvalError("cannot evaluate node '{}'", type(expr).__name__, internal=True)
        return handler(expr, env)

    # statements

    def _eval_statement(self, statement, env):
        if isinstance(statement, Let):
            return self._eval_let(statement, env)
        if isinstance(statement, ExpressionStmt):
            return self.eval_expression(statement.expression, env)
        raise EvalError("cannot evaluate statement '{}'", type(statement).__name__, internal=True)

    def _eval_let(self, statement, env):
        if statement.name in env:
            raise EvalError("'{}' is already initialized", statement.name)

        value = NULL if statement.value is None else self.eval_expression(statement.value, env)
        if isinstance(value, Returning):
            return value

        if isinstance(statement.value, Fn):
            value.name = statement.name
        return env.define(statement.name, value)

    def _eval_return(self, statement, env):
        if statement.value is None:
            return Returning(NULL)

        value = self.eval_expression(statement.value, env)
        if isinstance(value, Returning):
            return value
        return Returning(value)

    # expressions

    @staticmethod
    def _operand(result, op):
        """Rejects a return signal where a value is needed."""
        if isinstance(result, Returning):
            raise EvalError("invalid operand for '{}': a return cannot be used as a value", op)
        return result

    def _eval_prefix(self, expr, env):
        right = self._operand(self.eval_expression(expr.right, env), expr.operator)
        if not isinstance(right, Number):
            raise EvalError("invalid operand for '{}': {}", [expr.operator, right.kind])

        if expr.operator == "!":
            return boolean(right.value == 0)
        return Number(-right.value)

    def _eval_infix(self, expr, env):
        left = self._operand(self.eval_expression(expr.left, env), expr.operator)
        right = self._operand(self.eval_expression(expr.right, env), expr.operator)

        handler = self._operators.get(expr.operator)
        if handler is None:
            raise EvalError("unknown operator '{}'", expr.operator, internal=True)
        return handler(expr.operator, left, right)

    @staticmethod
    def _type_error(op, left, right):
        return EvalError("invalid operands for '{}': {} and {}", [op, left.kind, right.kind])

    def _add(self, op, left, right):
        """Numeric addition, or concatenation if either side is a String (Numbers use their textual form)."""
        if isinstance(left, Number) and isinstance(right, Number):
            return Number(left.value + right.value)

        concatenable = (Number, String)
        if isinstance(left, concatenable) and isinstance(right, concatenable):
            return String(str(left) + str(right))

        raise self._type_error(op, left, right)

    def _arithmetic(self, func):
        def apply(op, left, right):
            if not (isinstance(left, Number) and isinstance(right, Number)):
                raise self._type_error(op, left, right)
            return Number(func(left.value, right.value))
        return apply

    def _divide(self, op, left, right):
        if isinstance(right, Number) and right.value == 0 and isinstance(left, Number):
            raise EvalError("division by zero: '{}'", f"{left} {op} {right}")
        return self._arithmetic(operator.truediv)(op, left, right)

    @staticmethod
    def _equals(op, left, right):
        """Values of the same kind compare by value (Functions by identity); different kinds are never equal."""
        if type(left) is not type(right):
            return boolean(False)
        if isinstance(left, (Number, String)):
            return boolean(left.value == right.value)
        return boolean(left is right or isinstance(left, Null))

    def _comparison(self, func):
        def apply(op, left, right):
            if isinstance(left, Number) and isinstance(right, Number):
                return boolean(func(left.value, right.value))
            if isinstance(left, String) and isinstance(right, String):
                return boolean(func(left.value, right.value))
            raise self._type_error(op, left, right)
        return apply

    def _eval_if(self, expr, env):
        """The condition and each branch get a fresh child scope, so nothing bound inside them leaks out."""
        condition = self._operand(self.eval_expression(expr.condition, env.child()), "if")
        branch = expr.outcome if is_truthy(condition) else expr.alternate
        return self.eval_block(branch, env.child())

    def _eval_fn(self, expr, env):
        return Function(expr.params, expr.body, env)

    def _eval_call(self, expr, env):
        function = self._operand(self.eval_expression(expr.caller, env), "call")
        if not isinstance(function, Function):
            raise EvalError("'{}' is not a function: {}", [expr.caller, function.kind])

        args = [self._operand(self.eval_expression(arg, env), "call") for arg in expr.args]
        if len(args) != len(function.params):
            msg = "'{}' expects {} argument(s), got {}"
            raise EvalError(msg, [function, len(function.params), len(args)])

        call_env = function.env.child(in_function=True)
        for name, value in zip(function.params, args):
            call_env.define(name, value)

        return self.eval_block(function.body, call_env)

    def _eval_group(self, expr, env):
        return self.eval_expression(expr.inner, env)

    def _eval_identifier(self, expr, env):
        return env.get(expr.name)

    def _eval_num(self, expr, env):
        return Number(expr.value)

    def _eval_bool(self, expr, env):
        return boolean(expr.value)


def evaluate(program, env):
    """Evaluates a parsed Program in env. See Evaluator.eval."""
    return Evaluator().eval(program, env)
