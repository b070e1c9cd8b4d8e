"""
Markdown Document Model

Purpose: Typed, immutable nodes for the handful of Markdown constructs an
issue body needs, and the Document that holds them in order.

Responsibilities:
- Define the closed set of node variants (Literal, Code, Bold, CodeBlock,
  Heading, List, ListItem, HorizontalRule)
- Keep top-level nodes in append order
- Hand off to the renderer for serialization

Design notes:
- Nodes are frozen dataclasses; nested content is stored as tuples
- Heading levels outside 1..6 are clamped, never rejected
"""

from dataclasses import dataclass, field
from typing import Iterable, List as ListType, Optional, TextIO, Tuple, Union

__all__ = [
	"Node",
	"Literal",
	"Code",
	"Bold",
	"CodeBlock",
	"Heading",
	"List",
	"ListItem",
	"HorizontalRule",
	"Contents",
	"Document",
	"to_literal",
	"to_code",
	"to_bold",
	"to_code_block",
	"MIN_HEADING_LEVEL",
	"MAX_HEADING_LEVEL",
]

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


class Node:
	"""Base class of every Markdown node."""

	__slots__ = ()


Contents = Tuple[Node, ...]


def _as_contents(content: Union[Node, Iterable[Node], None]) -> Contents:
	if content is None:
		return ()
	if isinstance(content, Node):
		return (content,)
	return tuple(content)


@dataclass(frozen=True)
class Literal(Node):
	text: str


@dataclass(frozen=True)
class Code(Node):
	text: str


@dataclass(frozen=True)
class Bold(Node):
	text: str


@dataclass(frozen=True)
class CodeBlock(Node):
	text: str


@dataclass(frozen=True)
class Heading(Node):
	"""
	Section heading.

	`content` accepts a single node or any iterable of nodes and is stored as
	a tuple. `level` is clamped into [1, 6].
	"""

	level: int = MIN_HEADING_LEVEL
	content: Contents = ()

	def __post_init__(self) -> None:
		level = max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, int(self.level)))
		object.__setattr__(self, "level", level)
		object.__setattr__(self, "content", _as_contents(self.content))


@dataclass(frozen=True)
class ListItem(Node):
	content: Contents = ()

	def __post_init__(self) -> None:
		object.__setattr__(self, "content", _as_contents(self.content))


@dataclass(frozen=True)
class List(Node):
	"""Bullet list; items render in insertion order."""

	items: Tuple[ListItem, ...] = ()

	def __post_init__(self) -> None:
		items = tuple(self.items)
		for item in items:
			if not isinstance(item, ListItem):
				raise TypeError(f"List items must be ListItem, got {type(item).__name__}")
		object.__setattr__(self, "items", items)


@dataclass(frozen=True)
class HorizontalRule(Node):
	pass


def to_literal(text: str) -> Literal:
	return Literal(str(text))


def to_code(text: str) -> Code:
	return Code(str(text))


def to_bold(text: str) -> Bold:
	return Bold(str(text))


def to_code_block(text: str) -> CodeBlock:
	return CodeBlock(str(text))


@dataclass
class Document:
	"""Ordered sequence of top-level nodes for a single render."""

	nodes: ListType[Node] = field(default_factory=list)

	def append(self, *nodes: Node) -> "Document":
		"""Append nodes at the end. The only way a Document changes."""
		for node in nodes:
			if not isinstance(node, Node):
				raise TypeError(f"Document accepts Node values, got {type(node).__name__}")
			self.nodes.append(node)
		return self

	def extend(self, nodes: Optional[Iterable[Node]]) -> "Document":
		"""Append every node of an iterable; None is a no-op."""
		if nodes is None:
			return self
		return self.append(*nodes)

	def __len__(self) -> int:
		return len(self.nodes)

	def __iter__(self):
		return iter(self.nodes)

	def render(self, buf: TextIO) -> None:
		"""Write the Markdown text of this document into buf."""
		from IssueBody.Markdown.renderer import MarkdownRenderer

		MarkdownRenderer().write(self, buf)
