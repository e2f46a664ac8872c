"""
Spoon

A source-to-source compiler for Spoon, a small indentation-sensitive expression
language, producing Haxe-style class source.

This is the main package for Spoon, which extends the core DSL framework with the
Spoon grammar, AST and code generator.
"""

__version__ = "0.1.0"
__description__ = "Spoon - an indentation-sensitive language compiled to Haxe-style classes"

from .src.spoon_parser import (
    SpoonParser,
    SpoonIndenter,
    SpoonTransformer,
    parse_spoon,
    parse_spoon_file
)

from .src.spoon_compiler import (
    CodeGenerator,
    SpoonCompiler,
    class_name,
    compile_spoon,
    compile_spoon_file,
    generate
)

from .src.spoon_ast import Node, NodeType

from .src.spoon_errors import (
    SpoonError,
    SpoonSyntaxError,
    UnrecognizedShape,
    UnhandledNodeType
)

__all__ = [
    # Parser
    "SpoonParser",
    "SpoonIndenter",
    "SpoonTransformer",
    "parse_spoon",
    "parse_spoon_file",

    # Compiler
    "CodeGenerator",
    "SpoonCompiler",
    "class_name",
    "compile_spoon",
    "compile_spoon_file",
    "generate",

    # AST
    "Node",
    "NodeType",

    # Errors
    "SpoonError",
    "SpoonSyntaxError",
    "UnrecognizedShape",
    "UnhandledNodeType",
]
