#!/usr/bin/env python3
"""
Spoon Parser Implementation

Parses Spoon source with the core DSL framework and transforms the resulting Lark
parse tree into Spoon AST nodes.

`SpoonIndenter` provides block structure: a line indented deeper than the current
level opens a block, a line at the same level continues it, and a shallower line
closes every block it leaves.
"""

import logging
import re
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from lark import Token
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken
from lark.indenter import DedentError, Indenter

from core.parser import DSLParser, DSLTransformer

from .spoon_ast import Node, NodeType
from .spoon_errors import SpoonSyntaxError, UnrecognizedShape

logger = logging.getLogger(__name__)

# Grammar file path
GRAMMAR_FILE = Path(__file__).parent / "spoon.lark"

# Escapes are matched so an escaped "#" never opens an interpolation
INTERPOLATION = re.compile(r"\\.|#\{([^}\n]*)\}")

# Rules that can be parsed on their own
START_SYMBOLS = [
    "root",
    "name",
    "number",
    "chain",
    "call",
    "condition",
    "function",
    "closure",
    "expression",
]


class SpoonIndenter(Indenter):
    """
    Lark post-lexer turning leading whitespace into _INDENT/_DEDENT tokens.

    Unlike lark's stock Indenter, dedents are emitted before the newline that
    caused them, so a statement that ends with a block is still followed by a
    newline separating it from the next statement.
    """
    NL_type = "_NL"
    INDENT_type = "_INDENT"
    DEDENT_type = "_DEDENT"
    OPEN_PAREN_types: List[str] = []
    CLOSE_PAREN_types: List[str] = []
    tab_len = 8

    def handle_NL(self, token: Token) -> Iterator[Token]:
        indent_str = token.rsplit("\n", 1)[1]
        indent = indent_str.count(" ") + indent_str.count("\t") * self.tab_len

        if indent > self.indent_level[-1]:
            self.indent_level.append(indent)
            yield token
            yield Token.new_borrow_pos(self.INDENT_type, indent_str, token)
            return

        while indent < self.indent_level[-1]:
            self.indent_level.pop()
            yield Token.new_borrow_pos(self.DEDENT_type, indent_str, token)

        if indent != self.indent_level[-1]:
            raise DedentError(
                f"Unexpected dedent to column {indent} on line {token.end_line}. "
                f"Expected dedent to {self.indent_level[-1]}"
            )

        yield token


class SpoonParser(DSLParser):
    """
    Spoon parser that inherits from the core DSLParser.
    Loads the Spoon grammar and parses source text.
    """

    def __init__(self, grammar_file: Optional[str] = None):
        """
        Initialize the Spoon parser.

        Args:
            grammar_file: Path to the Spoon grammar file (optional)
        """
        if grammar_file is None:
            grammar_file = str(GRAMMAR_FILE)

        super().__init__(grammar_file, START_SYMBOLS, postlex=SpoonIndenter())

    def parse(self, code: str, start: str = "root"):
        """
        Parse Spoon source and return the Lark parse tree.

        Args:
            code: Spoon source code
            start: Grammar rule to match the whole input against

        Returns:
            Lark Tree

        Raises:
            SpoonSyntaxError: if the input does not match the grammar
        """
        try:
            return super().parse(code, start=start)
        except UnexpectedInput as e:
            raise self._syntax_error(e, code) from e
        except DedentError as e:
            raise SpoonSyntaxError(str(e)) from e

    def parse_and_transform(self, code: str) -> Node:
        """
        Parse Spoon source and transform it into an AST.

        Args:
            code: Spoon source code

        Returns:
            Root Node
        """
        tree = self.parse(code)
        transformer = SpoonTransformer(self)
        return transformer.transform(tree)

    def _syntax_error(self, error: UnexpectedInput, code: str) -> SpoonSyntaxError:
        if isinstance(error, UnexpectedToken):
            if error.token.type == "$END":
                message = "Unexpected end of input"
            else:
                message = f"Unexpected {error.token!r}"
            expected = error.expected
        elif isinstance(error, UnexpectedCharacters):
            message = f"Unexpected character {error.char!r}"
            expected = error.allowed or ()
        elif isinstance(error, UnexpectedEOF):
            message = "Unexpected end of input"
            expected = error.expected
        else:
            message = "Invalid syntax"
            expected = ()

        # Tokens made up by the indenter at end of input carry no position
        has_position = isinstance(error.line, int) and error.line > 0
        line = error.line if has_position else None
        column = error.column if has_position else None
        context = error.get_context(code) if has_position else ""

        return SpoonSyntaxError(
            message,
            line=line,
            column=column,
            expected=[self._describe_terminal(name) for name in expected],
            context=context.rstrip(),
        )

    def _describe_terminal(self, name: str) -> str:
        """Show string terminals as their literal text"""
        try:
            terminal = self.parser.get_terminal(name)
        except KeyError:
            return name
        if terminal.pattern.type == "str":
            return f'"{terminal.pattern.value}"'
        return name


class SpoonTransformer(DSLTransformer):
    """
    Spoon transformer that inherits from the core DSLTransformer.
    Converts Lark parse trees into Spoon AST nodes, one method per grammar rule.
    Each method checks the shape and arity it was handed; anything else raises
    UnrecognizedShape.

    The parser is used to read the expressions embedded in interpolated
    strings; one is created on first use when none is given.
    """

    def __init__(self, parser: Optional[SpoonParser] = None):
        super().__init__()
        self._parser = parser

    @property
    def parser(self) -> SpoonParser:
        if self._parser is None:
            self._parser = SpoonParser()
        return self._parser

    def generic(self, data, items):
        raise UnrecognizedShape(data, items)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _operation(self, op: str, left: Optional[Node] = None, right: Optional[Node] = None) -> Node:
        """Build an op node, classified by which operands are present"""
        if left is not None and right is not None:
            options = {"operation": "infix"}
            if op == "=":
                options["is_assign"] = True
            elif op == ".":
                options["is_chain"] = True
            return Node(NodeType.OP, [op, left, right], options)

        if left is not None:
            return Node(NodeType.OP, [op, left], {"operation": "suffix"})

        if right is not None:
            return Node(NodeType.OP, [op, right], {"operation": "prefix"})

        raise UnrecognizedShape("op", [op])

    def _reverse(self, condition: Node) -> Node:
        """Negate a condition, for unless and until"""
        return self._operation("!", right=condition)

    def _value(self, text: Any) -> Node:
        return Node(NodeType.VALUE, [str(text)])

    def _quote(self, text: str) -> str:
        """Re-quote the body of a double quoted string with single quotes"""
        return "'" + text.replace('\\"', '"').replace("'", "\\'") + "'"

    def _expect(self, label: str, children: List[Any], count: int) -> None:
        if len(children) != count:
            raise UnrecognizedShape(label, children)

    # ------------------------------------------------------------------
    # Program structure
    # ------------------------------------------------------------------

    def root(self, children):
        """Transform the whole file"""
        return Node(NodeType.ROOT, children)

    def block(self, children):
        """Transform an indented block"""
        return Node(NodeType.BLOCK, children)

    def import_stmt(self, children):
        """Transform import a.b.C"""
        return Node(NodeType.IMPORT, [self._value(segment) for segment in children])

    def return_stmt(self, children):
        """Transform return with zero or more values"""
        return Node(NodeType.RETURN, children)

    # ------------------------------------------------------------------
    # Functions, closures and parameters
    # ------------------------------------------------------------------

    def function(self, children):
        """Transform def name [params] body"""
        if len(children) == 2:
            name, body = children
            params = []
        elif len(children) == 3 and isinstance(children[1], list):
            name, params, body = children
        else:
            raise UnrecognizedShape("function", children)

        return Node(NodeType.FUNCTION, [str(name)] + params + [body])

    def parameters(self, children):
        return list(children)

    def parameter(self, children):
        """Transform the four parameter shapes into [type?, name, value?]"""
        name = str(children[0])
        rest = children[1:]

        if not rest:
            return Node(NodeType.PARAM, [name])

        if len(rest) == 1 and isinstance(rest[0], Token) and rest[0].type == "TYPE":
            return Node(NodeType.PARAM, [str(rest[0]), name], {"is_typed": True})

        if len(rest) == 1 and isinstance(rest[0], Node):
            return Node(NodeType.PARAM, [name, rest[0]])

        if len(rest) == 2 and isinstance(rest[0], Token) and isinstance(rest[1], Node):
            return Node(NodeType.PARAM, [str(rest[0]), name, rest[1]], {"is_typed": True})

        raise UnrecognizedShape("parameter", children)

    def _closure(self, children, options):
        """Build [type?] + params + [body], the return type first when present"""
        if not children:
            raise UnrecognizedShape("closure", children)
        *head, body = children
        types = [str(child) for child in head if isinstance(child, Token) and child.type == "TYPE"]
        params = [child for child in head if isinstance(child, Node)]
        if len(types) > 1 or len(types) + len(params) != len(head):
            raise UnrecognizedShape("closure", children)
        if types:
            options["is_typed"] = True
        return Node(NodeType.CLOSURE, types + params + [body], options)

    def closure(self, children):
        """Transform [params] [: Type] -> body"""
        return self._closure(children, {})

    def fat_closure(self, children):
        """Transform [params] [: Type] => body"""
        return self._closure(children, {"fat": True})

    # ------------------------------------------------------------------
    # Classes and annotations
    # ------------------------------------------------------------------

    def class_def(self, children):
        """Transform class Name [extends Base] body"""
        if len(children) == 2:
            name, body = children
            return Node(NodeType.CLASS, [str(name), body])
        if len(children) == 3:
            name, extends, body = children
            return Node(NodeType.CLASS, [str(name), str(extends), body], {"is_extended": True})
        raise UnrecognizedShape("class", children)

    def annotation(self, children):
        self._expect("annotation", children, 1)
        return Node(NodeType.ANNOTATION, children)

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def if_(self, children):
        """Transform if (condition) body [else body]"""
        if len(children) not in (2, 3):
            raise UnrecognizedShape("if", children)
        return Node(NodeType.IF, children)

    def unless(self, children):
        """Transform unless into an if over the negated condition"""
        if len(children) not in (2, 3):
            raise UnrecognizedShape("unless", children)
        condition, *rest = children
        return Node(NodeType.IF, [self._reverse(condition)] + rest)

    def ifdef(self, children):
        """Transform ifdef (flag) body [else body]"""
        if len(children) not in (2, 3):
            raise UnrecognizedShape("ifdef", children)
        return Node(NodeType.IFDEF, children)

    def for_(self, children):
        self._expect("for", children, 2)
        return Node(NodeType.FOR, children)

    def while_(self, children):
        self._expect("while", children, 2)
        return Node(NodeType.WHILE, children)

    def until(self, children):
        """Transform until into a while over the negated condition"""
        self._expect("until", children, 2)
        condition, body = children
        return Node(NodeType.WHILE, [self._reverse(condition), body])

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def operator(self, children):
        self._expect("operator", children, 1)
        return str(children[0])

    def binary(self, children):
        self._expect("binary", children, 3)
        left, op, right = children
        return self._operation(op, left=left, right=right)

    def assign(self, children):
        self._expect("assign", children, 2)
        left, right = children
        return self._operation("=", left=left, right=right)

    def update(self, children):
        self._expect("update", children, 3)
        left, op, right = children
        return self._operation(str(op), left=left, right=right)

    def prefix(self, children):
        self._expect("prefix", children, 2)
        op, right = children
        return self._operation(str(op), right=right)

    def suffix(self, children):
        self._expect("suffix", children, 2)
        left, op = children
        return self._operation(str(op), left=left)

    def chain(self, children):
        """Fold a.b.c into ((a . b) . c)"""
        if len(children) < 2:
            raise UnrecognizedShape("chain", children)
        node = children[0]
        for link in children[1:]:
            node = self._operation(".", left=node, right=link)
        return node

    # ------------------------------------------------------------------
    # Calls and literals
    # ------------------------------------------------------------------

    def call(self, children):
        """Transform a call with zero, one or many arguments"""
        if not children:
            raise UnrecognizedShape("call", children)
        name, *args = children
        return Node(NodeType.CALL, [str(name)] + args)

    def construct(self, children):
        """Transform new Type(args)"""
        if not children:
            raise UnrecognizedShape("construct", children)
        name, *args = children
        return Node(NodeType.NEW, [str(name)] + args)

    def access(self, children):
        """Transform a[index]"""
        self._expect("access", children, 2)
        return Node(NodeType.ACCESS, children)

    def array(self, children):
        return Node(NodeType.ARRAY, children)

    def hash(self, children):
        """Transform {key: value, ...} into alternating keys and values"""
        return Node(NodeType.HASH, children)

    def plain_string(self, children):
        self._expect("string", children, 1)
        text = str(children[0])
        if text.startswith("'"):
            return self._value(text)
        return self._value(self._quote(text[1:-1]))

    def interpolated_string(self, children):
        """Transform "a #{b} c" into literal and expression segments"""
        self._expect("string", children, 1)
        text = str(children[0])[1:-1]

        segments = []
        start = 0
        for match in INTERPOLATION.finditer(text):
            code = match.group(1)
            if code is None:
                continue
            segments.append(self._quote(text[start:match.start()]))
            tree = self.parser.parse(code, start="expression")
            segments.append(self.transform(tree))
            start = match.end()
        segments.append(self._quote(text[start:]))

        return Node(NodeType.VALUE, segments, {"is_interpolated": True})

    def this_value(self, children):
        """Transform @name"""
        self._expect("this", children, 1)
        return Node(NodeType.VALUE, ["this", str(children[0])], {"is_this": True})

    def self_value(self, children):
        """Transform @@name"""
        self._expect("self", children, 1)
        return Node(NodeType.VALUE, ["self", str(children[0])], {"is_self": True})

    def typed(self, children):
        """Transform name: Type"""
        self._expect("typed", children, 2)
        name, value_type = children
        return Node(NodeType.VALUE, [str(name), str(value_type)], {"is_typed": True})

    def boolean(self, children):
        self._expect("boolean", children, 1)
        return self._value(children[0])

    def name(self, children):
        self._expect("name", children, 1)
        return self._value(children[0])

    def number(self, children):
        self._expect("number", children, 1)
        return self._value(children[0])


# Convenience functions
def parse_spoon(content: str) -> Node:
    """
    Convenience function to parse Spoon source.

    Args:
        content: The Spoon source to parse

    Returns:
        Root AST node
    """
    parser = SpoonParser()
    return parser.parse_and_transform(content)


def parse_spoon_file(file_path: Union[str, Path]) -> Node:
    """
    Convenience function to parse a Spoon file.

    Args:
        file_path: Path to the Spoon source file

    Returns:
        Root AST node
    """
    parser = SpoonParser()
    with open(file_path, 'r', encoding='utf-8') as f:
        content = f.read()
    logger.debug(f"Parsing {file_path}")
    return parser.parse_and_transform(content)
