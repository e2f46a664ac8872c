#!/usr/bin/env python3
"""
Spoon Compiler Implementation

Compiles Spoon programs into Haxe-style class source. The compiler inherits from
the core DSLCompiler; code generation is done by `CodeGenerator`, which walks the
validated AST and keeps a stack of scope frames so that the first assignment to a
name introduces a `var` declaration and later ones do not.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from core.compiler import DSLCompiler

from .spoon_ast import Node, NodeType, closure_parts, param_parts
from .spoon_errors import UnhandledNodeType
from .spoon_parser import SpoonParser, SpoonTransformer

logger = logging.getLogger(__name__)

ROOT_TAB = "    "
INDENT = "  "


def compile_str(text: str) -> str:
    """Quoted strings pass through; identifiers have '-' replaced with '_'"""
    if text.startswith("'"):
        return text
    return text.replace("-", "_")


def class_name(path: Union[str, Path]) -> str:
    """
    Derive the generated class name from a file path or base name.

    Args:
        path: Source path such as "src/hello_world.spoon", or a bare name

    Returns:
        Class name, e.g. "HelloWorld"
    """
    base_name = Path(path).stem
    return "".join(piece.capitalize() for piece in base_name.split("_"))


class Namespace:
    """Stack of scope frames, each holding the names declared in it"""

    def __init__(self):
        self.frames: List[Dict[str, bool]] = []

    @contextmanager
    def frame(self):
        self.frames.append({})
        try:
            yield self.frames[-1]
        finally:
            self.frames.pop()

    def contains(self, name: str) -> bool:
        return any(name in frame for frame in self.frames)

    def declare(self, name: str) -> bool:
        """
        Declare a name in the current frame unless some frame already holds it.

        Returns:
            True if the name was newly declared
        """
        if self.contains(name):
            return False
        self.frames[-1][name] = True
        return True


class CodeGenerator:
    """
    Renders an AST into target source text.
    One generator is used per compilation; its namespace is the only mutable state.
    """

    def __init__(self, name: str = "main"):
        self.name = class_name(name)
        self.namespace = Namespace()

    def generate(self, root: Node) -> str:
        """Render a root node into a complete class"""
        return self.compile_node(root)

    def compile_node(self, node: Node, parent: Optional[Node] = None, tab: str = "") -> str:
        """Dispatch a node to its renderer"""
        renderer = RENDERERS.get(node.type)
        if renderer is None:
            raise UnhandledNodeType(node.type)
        return renderer(self, node, parent, tab)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _root(self, node, parent, tab):
        imports = ""
        body = ""

        with self.namespace.frame():
            self.namespace.declare(self.name)
            for child in node.children:
                if child.type == NodeType.IMPORT:
                    imports += self.compile_node(child, node, ROOT_TAB) + ";\n"
                else:
                    body += ROOT_TAB + self.compile_node(child, node, ROOT_TAB) + ";\n"

        return (f"{imports}\n"
                f"class {self.name} {{\n"
                f"  static public function main() {{\n"
                f"{body}"
                f"  }}\n"
                f"}}")

    def _block(self, node, parent, tab):
        inner = tab + INDENT
        lines = "".join(inner + self.compile_node(child, node, inner) + ";\n"
                        for child in node.children)
        return "{\n" + lines + tab + "}"

    def _import(self, node, parent, tab):
        return "import " + ".".join(self.compile_node(child, node, tab) for child in node.children)

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _parameters(self, node, params, tab):
        """Declare every parameter in the current frame, then render them"""
        for param in params:
            _, name, _ = param_parts(param)
            self.namespace.declare(compile_str(name))
        return ", ".join(self.compile_node(param, node, tab) for param in params)

    def _function(self, node, parent, tab):
        name, *params, body = node.children
        with self.namespace.frame():
            rendered = self._parameters(node, params, tab)
            return f"function {compile_str(name)}({rendered}) {self.compile_node(body, node, tab)}"

    def _closure(self, node, parent, tab):
        # Like parameter types, the return type is not carried into the output
        _, params, body = closure_parts(node)
        with self.namespace.frame():
            rendered = self._parameters(node, params, tab)
            return f"function ({rendered}) {self.compile_node(body, node, tab)}"

    def _param(self, node, parent, tab):
        # The type annotation is not carried into the output
        _, name, default = param_parts(node)
        if default is None:
            return compile_str(name)
        return f"{compile_str(name)} = {self.compile_node(default, node, tab)}"

    def _return(self, node, parent, tab):
        values = [self.compile_node(child, node, tab) for child in node.children]
        if not values:
            return "return"
        if len(values) == 1:
            return f"return {values[0]}"
        return f"return [{', '.join(values)}]"

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def _if(self, node, parent, tab):
        condition, body, *rest = node.children
        content = f"if ({self.compile_node(condition, node, tab)}) {self.compile_node(body, node, tab)}"
        if rest:
            content += f" else {self.compile_node(rest[0], node, tab)}"
        return content

    def _for(self, node, parent, tab):
        condition, body = node.children
        return f"for ({self.compile_node(condition, node, tab)}) {self.compile_node(body, node, tab)}"

    def _while(self, node, parent, tab):
        condition, body = node.children
        return f"while ({self.compile_node(condition, node, tab)}) {self.compile_node(body, node, tab)}"

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _op(self, node, parent, tab):
        operator, *operands = node.children
        operation = node.option("operation")

        if operation == "infix":
            left, right = operands
            prefix = ""
            if operator == "=" and self._declares(left):
                if self.namespace.declare(self.compile_node(left, node, tab)):
                    prefix = "var "
            content = (f"{prefix}{self.compile_node(left, node, tab)} "
                       f"{operator} {self.compile_node(right, node, tab)}")
        elif operation == "prefix":
            content = operator + self.compile_node(operands[0], node, tab)
        else:
            content = self.compile_node(operands[0], node, tab) + operator

        if parent is not None and parent.type == NodeType.OP:
            return f"({content})"
        return content

    def _declares(self, left: Node) -> bool:
        """Only plain names are declared; members already exist"""
        return (left.type == NodeType.VALUE
                and not left.option("is_this")
                and not left.option("is_self"))

    def _call(self, node, parent, tab):
        name, *args = node.children
        rendered = ", ".join(self.compile_node(arg, node, tab) for arg in args)
        return f"{compile_str(name)}({rendered})"

    def _new(self, node, parent, tab):
        name, *args = node.children
        rendered = ", ".join(self.compile_node(arg, node, tab) for arg in args)
        return f"new {name}({rendered})"

    def _array(self, node, parent, tab):
        return "[" + ", ".join(self.compile_node(item, node, tab) for item in node.children) + "]"

    def _value(self, node, parent, tab):
        if node.option("is_interpolated"):
            return " + ".join(child if isinstance(child, str) else self.compile_node(child, node, tab)
                              for child in node.children)
        if node.option("is_this"):
            return "this." + compile_str(node.children[1])
        if node.option("is_self"):
            return f"{self.name}.{compile_str(node.children[1])}"
        # A typed value keeps its name only
        return compile_str(node.children[0])


RENDERERS: Dict[NodeType, Callable[..., str]] = {
    NodeType.ROOT: CodeGenerator._root,
    NodeType.BLOCK: CodeGenerator._block,
    NodeType.FUNCTION: CodeGenerator._function,
    NodeType.CLOSURE: CodeGenerator._closure,
    NodeType.IF: CodeGenerator._if,
    NodeType.FOR: CodeGenerator._for,
    NodeType.WHILE: CodeGenerator._while,
    NodeType.OP: CodeGenerator._op,
    NodeType.CALL: CodeGenerator._call,
    NodeType.NEW: CodeGenerator._new,
    NodeType.ARRAY: CodeGenerator._array,
    NodeType.RETURN: CodeGenerator._return,
    NodeType.IMPORT: CodeGenerator._import,
    NodeType.PARAM: CodeGenerator._param,
    NodeType.VALUE: CodeGenerator._value,
}


def generate(root: Node, base_name: str = "main") -> str:
    """
    Render a root node with a fresh generator.

    Args:
        root: Root AST node
        base_name: Base name the class name is derived from

    Returns:
        Target source text
    """
    return CodeGenerator(base_name).generate(root)


class SpoonCompiler(DSLCompiler):
    """
    Spoon compiler that inherits from the core DSLCompiler.
    Compiles Spoon programs into a single target class.
    """

    def __init__(self, name: str = "main"):
        """
        Initialize the Spoon compiler.

        Args:
            name: Base name of the program, used to name the generated class
        """
        parser = SpoonParser()
        transformer = SpoonTransformer(parser)
        super().__init__(parser, transformer)
        self.name = name

    def _compile(self, program: Node) -> str:
        logger.debug(f"Generating class {class_name(self.name)} from "
                     f"{sum(1 for _ in program.walk())} nodes")
        return generate(program, self.name)


# Convenience functions
def compile_spoon(content: str, name: str = "main") -> str:
    """
    Convenience function to compile Spoon source.

    Args:
        content: Spoon source code
        name: Base name of the program

    Returns:
        Target source text
    """
    compiler = SpoonCompiler(name)
    return compiler.compile(content)


def compile_spoon_file(file_path: Union[str, Path]) -> str:
    """
    Convenience function to compile a Spoon file.
    The class name is derived from the file name.

    Args:
        file_path: Path to the Spoon source file

    Returns:
        Target source text
    """
    path = Path(file_path)
    compiler = SpoonCompiler(path.stem)
    return compiler.compile(path)
