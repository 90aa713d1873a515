"""
Derivation trees - the record of every choice made during one generation.

Nodes are stored in a flat arena owned by a DerivationTree and refer to
each other by integer id. A Node is a lightweight read-only view (tree, id),
so parent links never keep anything alive on their own and the structure
contains no reference cycles.

Two renderers walk a finished tree:
- render_text / write_text: depth-first, left-to-right concatenation of leaf text
- s_expression: an indented structural dump, one node per line
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional


class NodeKind(Enum):
    """What kind of rule application a node records."""
    LITERAL = "literal"
    SEQUENCE = "sequence"
    ALTERNATIVE = "alternative"
    OPTIONAL = "optional"
    REPETITION = "repetition"
    NON_TERMINAL = "non_terminal"
    CHARACTER = "character"


LEAF_KINDS = (NodeKind.LITERAL, NodeKind.CHARACTER)


@dataclass
class _NodeRecord:
    kind: NodeKind
    parent: Optional[int]
    name: Optional[str] = None
    text: str = ""
    # Alternative: branch index; Optional: presence; Repetition: count; Character: code point
    value: Any = None
    children: List[int] = field(default_factory=list)


class DerivationTree:
    """
    Arena of node records for one generation.

    The generator appends nodes while expanding; once generation finishes the
    tree is frozen and further additions raise RuntimeError.
    """

    def __init__(self):
        self._records: List[_NodeRecord] = []
        self._frozen = False

    def add(
        self,
        kind: NodeKind,
        parent: Optional[int],
        name: Optional[str] = None,
        text: str = "",
        value: Any = None,
    ) -> int:
        """
        Append a node, linking it under `parent`.

        Returns:
            The new node's id
        """
        if self._frozen:
            raise RuntimeError("Derivation tree is frozen")
        node_id = len(self._records)
        self._records.append(_NodeRecord(kind, parent, name, text, value))
        if parent is not None:
            self._records[parent].children.append(node_id)
        return node_id

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def node(self, node_id: int) -> 'Node':
        if not 0 <= node_id < len(self._records):
            raise IndexError(f"No node with id {node_id}")
        return Node(self, node_id)

    @property
    def root(self) -> 'Node':
        return self.node(0)

    def _record(self, node_id: int) -> _NodeRecord:
        return self._records[node_id]

    def __len__(self) -> int:
        return len(self._records)


class Node:
    """Read-only view of one node in a DerivationTree."""

    __slots__ = ("_tree", "_id")

    def __init__(self, tree: DerivationTree, node_id: int):
        self._tree = tree
        self._id = node_id

    @property
    def _rec(self) -> _NodeRecord:
        return self._tree._record(self._id)

    @property
    def id(self) -> int:
        return self._id

    @property
    def tree(self) -> DerivationTree:
        return self._tree

    @property
    def kind(self) -> NodeKind:
        return self._rec.kind

    @property
    def name(self) -> Optional[str]:
        """Production name for non-terminals, class name for characters, else None."""
        return self._rec.name

    @property
    def text(self) -> str:
        """Text of a leaf node; empty for inner nodes."""
        return self._rec.text

    @property
    def parent(self) -> Optional['Node']:
        parent_id = self._rec.parent
        return None if parent_id is None else Node(self._tree, parent_id)

    @property
    def children(self) -> List['Node']:
        return [Node(self._tree, child) for child in self._rec.children]

    def ancestors(self) -> Iterator['Node']:
        """Yield parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def ancestor(self, name: str) -> Optional['Node']:
        """Nearest non-terminal ancestor with the given production name."""
        for node in self.ancestors():
            if node.kind == NodeKind.NON_TERMINAL and node.name == name:
                return node
        return None

    @property
    def production(self) -> Optional['Node']:
        """Nearest enclosing non-terminal, skipping sequences, optionals and the like."""
        for node in self.ancestors():
            if node.kind == NodeKind.NON_TERMINAL:
                return node
        return None

    @property
    def choice(self) -> Optional[int]:
        """Chosen branch index of an alternative node."""
        return self._rec.value if self.kind == NodeKind.ALTERNATIVE else None

    @property
    def present(self) -> Optional[bool]:
        """Whether an optional node's rule was expanded."""
        return self._rec.value if self.kind == NodeKind.OPTIONAL else None

    @property
    def count(self) -> Optional[int]:
        """Number of repetitions of a repetition node."""
        return self._rec.value if self.kind == NodeKind.REPETITION else None

    @property
    def codepoint(self) -> Optional[int]:
        return self._rec.value if self.kind == NodeKind.CHARACTER else None

    def render(self) -> str:
        return render_text(self)

    def s_expression(self) -> str:
        return s_expression(self)

    def __eq__(self, other) -> bool:
        return isinstance(other, Node) and other._tree is self._tree and other._id == self._id

    def __hash__(self) -> int:
        return hash((id(self._tree), self._id))

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name is not None else ""
        return f"Node({self._id}, {self.kind.value}{label})"


# --- Renderers ---

def writer_for(sink) -> Callable[[str], Any]:
    """
    Adapt an output sink to a function taking text chunks.

    Accepts anything with a write(str) method (io.StringIO, open files,
    sys.stdout) or a plain callable.
    """
    write = getattr(sink, "write", None)
    if callable(write):
        return write
    if callable(sink):
        return sink
    raise TypeError(f"Output sink must have write() or be callable, got {type(sink).__name__}")


def _leaf_texts(node: Node) -> Iterator[str]:
    tree = node.tree
    stack = [node.id]
    while stack:
        record = tree._record(stack.pop())
        if record.kind in LEAF_KINDS:
            if record.text:
                yield record.text
        else:
            stack.extend(reversed(record.children))


def render_text(node: Node) -> str:
    """Concatenate the text of every leaf below `node`, left to right."""
    return "".join(_leaf_texts(node))


def write_text(node: Node, sink) -> int:
    """
    Write the text of `node` to a sink chunk by chunk.

    Returns:
        Number of code points written
    """
    write = writer_for(sink)
    written = 0
    for chunk in _leaf_texts(node):
        write(chunk)
        written += len(chunk)
    return written


def _header(record: _NodeRecord) -> str:
    if record.kind == NodeKind.NON_TERMINAL:
        return record.name
    if record.kind == NodeKind.ALTERNATIVE:
        return f"alternative {record.value}"
    if record.kind == NodeKind.OPTIONAL:
        return "optional present" if record.value else "optional absent"
    if record.kind == NodeKind.REPETITION:
        return f"repetition {record.value}"
    return record.kind.value


def s_expression(node: Node, indent: str = "  ") -> str:
    """
    Dump the structure below `node`, one node per line.

    Literals print as Python string literals, characters as
    [CLASS U+XXXX], inner nodes as "(header" with their children indented
    beneath and the closing parenthesis on the last descendant's line:

        (foo
          (sequence
            'Hello'
            (optional absent)))
    """
    tree = node.tree
    lines: List[str] = []
    # (node id, depth, closing marker)
    stack = [(node.id, 0, False)]
    while stack:
        node_id, depth, closing = stack.pop()
        if closing:
            lines[-1] += ")"
            continue
        record = tree._record(node_id)
        pad = indent * depth
        if record.kind == NodeKind.LITERAL:
            lines.append(pad + repr(record.text))
        elif record.kind == NodeKind.CHARACTER:
            lines.append(f"{pad}[{record.name} U+{record.value:04X}]")
        elif not record.children:
            lines.append(f"{pad}({_header(record)})")
        else:
            lines.append(f"{pad}({_header(record)}")
            stack.append((node_id, depth, True))
            for child in reversed(record.children):
                stack.append((child, depth + 1, False))
    return "\n".join(lines)
