"""
Spoon compiler errors.

Every stage fails fast with one of these. `SpoonSyntaxError` is the only one a
user can cause; the other two mean the transformer or the code generator has a
gap and are reported as internal faults.
"""

from typing import Any, Iterable, Optional


class SpoonError(Exception):
    """Base class for all Spoon compilation errors"""


class SpoonSyntaxError(SpoonError):
    """Source text does not match the grammar."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None,
                 expected: Iterable[str] = (), context: str = ""):
        self.line = line
        self.column = column
        self.expected = sorted(set(expected))
        self.context = context

        location = f"line {line}, column {column}" if line and line > 0 else "end of input"
        text = f"{message} at {location}"
        if self.expected:
            text += f"\nExpected one of: {', '.join(self.expected)}"
        if context:
            text += f"\n\n{context}"
        super().__init__(text)


class UnrecognizedShape(SpoonError):
    """A parse tree or AST subtree matched no transformation rule."""

    def __init__(self, label: Any, children: Any = ()):
        self.label = label
        self.children = list(children)
        super().__init__(f"Unrecognized shape for {label!s}: {self.children!r}")


class UnhandledNodeType(SpoonError):
    """The code generator has no renderer for a node type."""

    def __init__(self, node_type: Any):
        self.node_type = node_type
        super().__init__(f"No renderer for node type {node_type!s}")
