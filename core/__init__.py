"""
Core DSL framework: base parser, transformer, compiler and program classes
shared by concrete DSL implementations.
"""
