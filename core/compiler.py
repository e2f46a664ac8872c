# compiler/base.py

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, Union
from pathlib import Path
import logging
import time

"""
This file defines the base class for all DSL compilers.

A `DSLCompiler` takes DSL source code through a complete compilation pipeline:
1. Parsing (code - parse tree)
2. Transformation (parse tree - program AST)
3. Validation (check internal consistency)
4. Code Generation (program AST - output code or executable logic)

Steps 1-3 are shared by `compile` and `to_dict`; subclasses implement `_compile`
for step 4.
"""

logger = logging.getLogger(__name__)


class DSLCompiler(ABC):
    """
    Base class for compilers that turn DSL source code into target code.
    Parses - transforms - validates - generates code.
    """

    def __init__(self, parser: Any, transformer: Any):
        """
        Initialize the compiler with a parser and a transformer.

        :param parser: Instance of a DSLParser
        :param transformer: Instance of a DSLTransformer
        """
        self.parser = parser
        self.transformer = transformer
        self.program = None  # Holds the internal AST representation of the program

    def _front_end(self, code: Union[Path, str]) -> Tuple[str, Any, Any]:
        """
        Read, parse, transform and validate the source.

        :param code: DSL source code as a string or a file path
        :return: (source code, parse tree, validated program)
        """
        if isinstance(code, Path):
            code = code.read_text(encoding='utf-8')

        started = time.perf_counter()
        parse_tree = self.parser.parse(code)
        parsed = time.perf_counter()
        program = self.transformer.transform(parse_tree)

        # Ensure the program implements and passes validation
        if not hasattr(program, "validate"):
            raise NotImplementedError("Program does not implement `validate()`.")
        program.validate()

        logger.debug(f"Parsed in {parsed - started:.4f}s, transformed and validated "
                     f"in {time.perf_counter() - parsed:.4f}s")
        self.program = program
        return code, parse_tree, program

    def to_dict(self, code: Union[Path, str]) -> Dict[str, Any]:
        """
        Returns a dictionary representing all intermediate stages of compilation.
        Useful for debugging, visualization, or program introspection.

        :param code: DSL source code as a string or a file path
        :return: Dictionary with source code, parse tree, AST, and compiler output
        """
        source, parse_tree, program = self._front_end(code)

        return {
            "source_code": source,
            "parse_tree": parse_tree,
            "ast": program,
            "compiler_output": self._compile(program)
        }

    @abstractmethod
    def _compile(self, program: Any) -> str:
        """
        Subclasses must implement this method to define how the validated
        program is converted into the final output.

        :param program: The validated AST or program representation
        :return: Final compiled output as a string
        """
        pass

    def compile(self, code: Union[Path, str]) -> str:
        """
        Runs the full compilation pipeline: parse - transform - validate - compile.

        :param code: DSL source code as a string or a file path
        :return: Final compiled output as a string
        """
        _, _, program = self._front_end(code)
        return self._compile(program)
