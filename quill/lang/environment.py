"""Lexical scopes. Environments form a chain from the innermost scope outward: lookups walk the chain, definitions
only ever touch the innermost scope, and a name can be bound at most once per scope.
"""

from quill.lang.error import EvalError


class Environment:
    """A single scope. in_function marks the top scope of a function call, where a return signal is consumed."""

    def __init__(self, outer=None, in_function=False):
        self.variables = {}
        self.outer = outer
        self.in_function = in_function

    def get(self, name):
        """Returns the value bound to name in the nearest enclosing scope."""
        env = self
        while env is not None:
            if name in env.variables:
                return env.variables[name]
            env = env.outer
        raise EvalError("undefined variable '{}'", name)

    def define(self, name, value):
        """Binds name in this scope. Rebinding a name in the same scope is an error; shadowing an outer one is not."""
        if name in self.variables:
            raise EvalError("'{}' is already initialized", name)
        self.variables[name] = value
        return value

    def child(self, in_function=False):
        return Environment(self, in_function)

    def __contains__(self, name):
        return name in self.variables

    def __repr__(self):
        depth = 0
        env = self.outer
        while env is not None:
            depth += 1
            env = env.outer
        return f"Environment(names={sorted(self.variables)}, depth={depth}, in_function={self.in_function})"
