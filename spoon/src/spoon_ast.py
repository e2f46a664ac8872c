from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from core.dataclass import DSLProgram

from .spoon_errors import UnrecognizedShape

"""
Spoon Abstract Syntax Tree

A single node type flows from the transformer to the code generator. Each node
carries a type tag, an ordered tuple of children (nested nodes or literal
strings such as names, numbers, quoted strings and operator symbols) and a
read-only mapping of option flags.

Option flags:
- operation: "infix", "prefix" or "suffix" on op nodes
- is_assign: infix "=" operations
- is_chain: infix "." operations
- is_typed: params, values and closures that carry a type name
- is_interpolated: string values built from several segments
- is_this / is_self: member values written @name / @@name
- is_extended: classes with an extends clause
- fat: closures written with "=>"

The code generator reads `operation`, `is_interpolated`, `is_this`, `is_self`
and `is_typed`; the rest are recorded for later stages.
"""


class NodeType(str, Enum):
    ROOT = "root"
    BLOCK = "block"
    FUNCTION = "function"
    CLOSURE = "closure"
    IF = "if"
    IFDEF = "ifdef"
    FOR = "for"
    WHILE = "while"
    OP = "op"
    CALL = "call"
    NEW = "new"
    RETURN = "return"
    IMPORT = "import"
    PARAM = "param"
    VALUE = "value"
    ARRAY = "array"
    HASH = "hash"
    ANNOTATION = "annotation"
    ACCESS = "access"
    CLASS = "class"

    def __str__(self) -> str:
        return self.value


Child = Union["Node", str]


@dataclass(frozen=True)
class Node(DSLProgram):
    """
    Immutable AST node.
    Extends the core DSLProgram so a whole tree can be validated before code generation.
    """
    type: NodeType
    children: Tuple[Child, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Accept any sequence and mapping, store read-only copies
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def option(self, name: str, default: Optional[Any] = None) -> Any:
        """Return an option flag, or `default` when it is not set"""
        return self.options.get(name, default)

    def check(self) -> None:
        """Check that the children match what the node type and options promise"""
        checker = _CHECKS.get(self.type)
        if checker is not None and not checker(self):
            raise UnrecognizedShape(self.type, self.children)

    def subprograms(self) -> Iterator["Node"]:
        return (child for child in self.children if isinstance(child, Node))

    def __hash__(self) -> int:
        return hash((self.type, self.children, tuple(sorted(self.options.items()))))

    def __repr__(self) -> str:
        options = f", {dict(self.options)!r}" if self.options else ""
        return f"Node({self.type!s}, {list(self.children)!r}{options})"


# ============================================================================
# SHAPE CHECKS
# ============================================================================

def _nodes(children) -> bool:
    return all(isinstance(child, Node) for child in children)


def _strings(children) -> bool:
    return all(isinstance(child, str) for child in children)


def _is_param(child) -> bool:
    return isinstance(child, Node) and child.type == NodeType.PARAM


def _check_op(node: Node) -> bool:
    arity = {"infix": 3, "prefix": 2, "suffix": 2}.get(node.option("operation"))
    return (arity == len(node.children)
            and isinstance(node.children[0], str)
            and _nodes(node.children[1:]))


def _check_function(node: Node) -> bool:
    return (len(node.children) >= 2
            and isinstance(node.children[0], str)
            and all(_is_param(child) for child in node.children[1:-1])
            and isinstance(node.children[-1], Node))


def _check_closure(node: Node) -> bool:
    children = node.children
    if node.option("is_typed"):
        if not children or not isinstance(children[0], str):
            return False
        children = children[1:]
    return (len(children) >= 1
            and all(_is_param(child) for child in children[:-1])
            and isinstance(children[-1], Node))


def _check_param(node: Node) -> bool:
    names = 2 if node.option("is_typed") else 1
    head, tail = node.children[:names], node.children[names:]
    return (len(head) == names
            and _strings(head)
            and len(tail) <= 1
            and _nodes(tail))


def _check_value(node: Node) -> bool:
    if node.option("is_interpolated"):
        return len(node.children) > 1
    if node.option("is_this") or node.option("is_self") or node.option("is_typed"):
        return len(node.children) == 2 and _strings(node.children)
    return len(node.children) == 1 and isinstance(node.children[0], str)


def _check_named(node: Node) -> bool:
    return (len(node.children) >= 1
            and isinstance(node.children[0], str)
            and _nodes(node.children[1:]))


def _check_import(node: Node) -> bool:
    return (len(node.children) >= 1
            and all(isinstance(child, Node) and child.type == NodeType.VALUE
                    for child in node.children))


def _check_class(node: Node) -> bool:
    names = 2 if node.option("is_extended") else 1
    return (len(node.children) == names + 1
            and _strings(node.children[:names])
            and isinstance(node.children[-1], Node))


def _check_condition(node: Node) -> bool:
    return len(node.children) in (2, 3) and _nodes(node.children)


_CHECKS = {
    NodeType.OP: _check_op,
    NodeType.IF: _check_condition,
    NodeType.IFDEF: _check_condition,
    NodeType.FOR: lambda node: len(node.children) == 2 and _nodes(node.children),
    NodeType.WHILE: lambda node: len(node.children) == 2 and _nodes(node.children),
    NodeType.FUNCTION: _check_function,
    NodeType.CLOSURE: _check_closure,
    NodeType.PARAM: _check_param,
    NodeType.VALUE: _check_value,
    NodeType.CALL: _check_named,
    NodeType.NEW: _check_named,
    NodeType.IMPORT: _check_import,
    NodeType.CLASS: _check_class,
    NodeType.ACCESS: lambda node: len(node.children) == 2 and _nodes(node.children),
    NodeType.ANNOTATION: lambda node: len(node.children) == 1 and _nodes(node.children),
    NodeType.HASH: lambda node: len(node.children) % 2 == 0 and _nodes(node.children),
    NodeType.ROOT: lambda node: _nodes(node.children),
    NodeType.BLOCK: lambda node: _nodes(node.children),
    NodeType.RETURN: lambda node: _nodes(node.children),
    NodeType.ARRAY: lambda node: _nodes(node.children),
}


def param_parts(node: Node) -> Tuple[Optional[str], str, Optional[Node]]:
    """Split a param node into (type, name, default)"""
    children = list(node.children)
    param_type = children.pop(0) if node.option("is_typed") else None
    name = children.pop(0)
    default = children.pop(0) if children else None
    return param_type, name, default


def closure_parts(node: Node) -> Tuple[Optional[str], Tuple[Node, ...], Node]:
    """Split a closure node into (return type, params, body)"""
    children = node.children
    return_type = None
    if node.option("is_typed"):
        return_type, children = children[0], children[1:]
    return return_type, children[:-1], children[-1]
