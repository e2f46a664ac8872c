import logging
from typing import Any, Iterable, Optional

from lark import Lark
from lark import Transformer
from lark.exceptions import VisitError

"""
This file defines the core parsing logic for all DSLs.

`DSLParser` is responsible for loading an EBNF grammar and converting raw DSL code
into a parse tree using the Lark parsing library.

`DSLTransformer` is a base class for transforming the Lark parse tree into a custom
abstract syntax tree (AST) or structured Python dataclasses. Each DSL should subclass
this transformer to define how grammar rules map to program elements.
"""

logger = logging.getLogger(__name__)


class DSLParser():
    def __init__(self, grammar_file: str, start_symbol: Any, postlex: Optional[Any] = None):
        """
        Initialize the DSL parser by loading the EBNF grammar
        and setting up the Lark parser.

        :param grammar_file: Path to the EBNF grammar file
        :param start_symbol: The start symbol (or list of symbols) for grammar parsing
        :param postlex: Optional post-lexer run over the token stream (e.g. an Indenter)
        """
        # Read the grammar definition from file
        with open(grammar_file, 'r', encoding='utf-8') as f:
            grammar = f.read()

        self.start_symbol = start_symbol

        # Earley copes with the optional and bare forms in small expression grammars
        # without hand-resolving LALR conflicts. A post-lexer needs the basic lexer.
        self.parser = Lark(grammar, start=start_symbol, parser='earley', lexer='basic',
                           postlex=postlex, maybe_placeholders=False,
                           propagate_positions=True, cache=False)
        logger.debug(f"Loaded grammar from {grammar_file}")

    def parse(self, code: str, start: Optional[str] = None):
        """
        Parse the given DSL code and return the Lark parse tree.

        :param code: DSL code as a string
        :param start: Start symbol to use when the parser has several
        :return: The resulting parse tree
        """
        tree = self.parser.parse(code, start=start)
        return tree

    def lex(self, code: str) -> Iterable[Any]:
        """
        Tokenize the given DSL code without parsing it, keeping ignored tokens.

        :param code: DSL code as a string
        :return: Iterator over Lark tokens
        """
        return self.parser.lex(code, dont_ignore=True)


class DSLTransformer(Transformer):
    """
    A generic base transformer class based on Lark's Transformer,
    used to convert a Lark parse tree into an AST or other formats.
    Subclasses should implement specific node transformation logic.
    """
    def __init__(self):
        super().__init__()

    def transform(self, tree):
        """
        Recursively traverse the tree and transform each node into the target format.

        Lark wraps errors raised inside rule callbacks in a VisitError; the original
        exception is re-raised so callers see the DSL's own error types.
        """
        try:
            return super().transform(tree)
        except VisitError as e:
            raise e.orig_exc from e

    def __default__(self, data, children, meta):
        """
        Called for every rule without a dedicated method.
        Subclasses override `generic` to decide what an unhandled rule becomes.
        """
        return self.generic(data, children)

    def generic(self, data, items):
        """
        Default transformation method for all nodes not explicitly handled.

        :param data: Name of the grammar rule
        :param items: List of child elements for the node
        :return: A generic dictionary structure representing the node
        """
        return {"type": str(data), "data": items[0] if items else None, "children": items[1:]}
