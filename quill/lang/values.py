"""Runtime values of the quill language. There is no boolean type: true/false and every comparison produce the
Numbers 1 and 0, and truthiness is "anything but the Number 0".

Each value has two textual forms: str() is its raw text (as used for string concatenation) and inspect() is the form
printed by the shell.
"""

from dataclasses import dataclass, field

from quill.pure.tokens import format_number


class Value:
    """Superclass of every runtime value."""
    kind = "value"

    def inspect(self):
        return str(self)


@dataclass(frozen=True)
class Number(Value):
    value: float
    kind = "number"

    def __str__(self):
        return format_number(self.value)


@dataclass(frozen=True)
class String(Value):
    value: str
    kind = "string"

    def __str__(self):
        return self.value

    def inspect(self):
        return '"' + self.value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class Null(Value):
    kind = "null"

    def __str__(self):
        return "null"


@dataclass(eq=False)
class Function(Value):
    """Closure: a function literal together with the Environment it was evaluated in. Compared by identity."""
    params: tuple
    body: tuple
    env: object = field(repr=False)
    name: str = None
    kind = "function"

    def __str__(self):
        return f"<fn {self.name or ''}({', '.join(self.params)})>"


NULL = Null()
TRUE = Number(1.0)
FALSE = Number(0.0)


def boolean(condition):
    """Lowers a Python bool to a quill Number."""
    return TRUE if condition else FALSE


def is_truthy(value):
    return not (isinstance(value, Number) and value.value == 0)


def from_python(obj):
    """Converts a host Python object into a Value. Used to bind host values into a session."""
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, bool):
        return boolean(obj)
    if isinstance(obj, (int, float)):
        return Number(float(obj))
    if isinstance(obj, str):
        return String(obj)
    raise TypeError(f"cannot convert {type(obj).__name__} to a quill value")
