"""
Type checking error handling for Neutron.

Type errors are soft: they are collected on a list and never raised, and the
checker keeps walking sibling and child nodes after reporting one.

Author: xwest
"""

from typing import Optional

from ..lexer.errors import NeutronError
from ..parser.ast_nodes import ASTNode


class SemanticError(NeutronError):
    """A problem found by the type checker, anchored to an AST node's range."""

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        node: Optional[ASTNode] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message, start, end, code=code, help_text=help_text)
        self.node = node

    def to_dict(self) -> dict:
        return {"message": self.message, "start": self.start, "end": self.end}


def create_type_mismatch_error(expected, actual, node: ASTNode, context: str) -> SemanticError:
    """
    Create a type mismatch error at ``node``'s range.

    ``context`` finishes the sentence, e.g. "for variable 'x'" or
    "when assigning to 'x'".
    """
    return SemanticError(
        message=f"Type mismatch: expected {expected} but got {actual} {context}",
        start=node.start,
        end=node.end,
        node=node,
        code="S001",
        help_text=f"Provide a value of type {expected} here."
    )
