"""Tree traversal helpers, the Python counterpart of go/ast.Inspect."""

from collections.abc import Iterator
from dataclasses import fields

from go_openapi_gen.golang.nodes import Node


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in source order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first, in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


def find_all(node: Node, node_type: type) -> Iterator:
    """Yield every descendant of ``node`` (itself included) of ``node_type``."""
    for child in walk(node):
        if isinstance(child, node_type):
            yield child
