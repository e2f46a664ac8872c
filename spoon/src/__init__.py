"""
Spoon compiler sources: grammar, parser and transformer, AST, and code generator.
"""
