from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator

"""
This file defines the core data structures used to represent DSL programs.

`DSLProgram` is the base of every node in a DSL program tree. Trees are built once
by the transformer and only read afterwards, so programs are frozen dataclasses.

Each node checks its own shape in `check`, and names the nodes below it in
`subprograms`; `validate` applies the check to the whole tree.
"""


@dataclass(frozen=True)
class DSLProgram(ABC):
    @abstractmethod
    def check(self) -> None:
        """Raise if this node alone is inconsistent"""
        pass

    def subprograms(self) -> Iterable["DSLProgram"]:
        """Nodes directly below this one"""
        return ()

    def walk(self) -> Iterator["DSLProgram"]:
        """Yield this node and every node below it, depth first"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.subprograms())))

    def validate(self) -> None:
        """Validate the integrity of the program"""
        for node in self.walk():
            node.check()
