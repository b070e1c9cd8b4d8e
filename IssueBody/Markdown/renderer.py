"""
Markdown Renderer

Purpose: Serialize a Document into Markdown source text.

Responsibilities:
- Walk top-level nodes in order
- Emit per-kind syntax (inline code spacing, fences, heading markers, bullets)
- Fail fast on node types outside the closed set

Design notes:
- Output is consumed by GitHub's Markdown viewer; spacing is bit-exact
- Stateless: one renderer can serve any number of documents
"""

import io
from typing import Callable, Dict, Iterable, Optional, TextIO, Type

from IssueBody.Markdown.document import (
	Bold,
	Code,
	CodeBlock,
	Document,
	Heading,
	HorizontalRule,
	List,
	ListItem,
	Literal,
	Node,
)

__all__ = ["MarkdownRenderer", "UnknownNodeError", "render"]

CODE_FENCE = "```"
BULLET = "- "
HEADING_MARKER = "#"
RULE = "---"


class UnknownNodeError(TypeError):
	"""Raised when the renderer meets a node type it has no rule for."""

	def __init__(self, node: object) -> None:
		super().__init__(f"cannot render node of type {type(node).__name__}")
		self.node = node


class MarkdownRenderer:
	"""Render Markdown nodes to text."""

	def __init__(self) -> None:
		self._handlers: Dict[Type[Node], Callable[[Node], str]] = {
			Literal: self._render_literal,
			Code: self._render_code,
			Bold: self._render_bold,
			CodeBlock: self._render_code_block,
			Heading: self._render_heading,
			List: self._render_list,
			ListItem: self._render_list_item,
			HorizontalRule: self._render_rule,
		}

	def render_node(self, node: Node) -> str:
		"""Render a single node. Raises UnknownNodeError for foreign types."""
		handler = self._handlers.get(type(node))
		if handler is None:
			raise UnknownNodeError(node)
		return handler(node)

	def render_inline(self, nodes: Iterable[Node]) -> str:
		return "".join(self.render_node(node) for node in nodes)

	def write(self, document: Document, buf: TextIO) -> None:
		"""Write every top-level node of document into buf, in order."""
		for node in document:
			buf.write(self.render_node(node))

	def _render_literal(self, node: Literal) -> str:
		return node.text

	def _render_code(self, node: Code) -> str:
		return f" `{node.text}` "

	def _render_bold(self, node: Bold) -> str:
		return f"**{node.text}**"

	def _render_code_block(self, node: CodeBlock) -> str:
		return f"{CODE_FENCE}\n{node.text}\n{CODE_FENCE}\n"

	def _render_heading(self, node: Heading) -> str:
		return f"{HEADING_MARKER * node.level} {self.render_inline(node.content)}\n"

	def _render_list_item(self, node: ListItem) -> str:
		return f"{BULLET}{self.render_inline(node.content)}\n"

	def _render_list(self, node: List) -> str:
		if not node.items:
			return ""
		# Blank line closes the list block
		return "".join(self._render_list_item(item) for item in node.items) + "\n"

	def _render_rule(self, node: HorizontalRule) -> str:
		return f"{RULE}\n\n"


def render(document: Document, buf: Optional[TextIO] = None) -> str:
	"""
	Render a document to Markdown.

	Args:
		document: Document to serialize
		buf: Optional text buffer to write into as well

	Returns:
		The rendered Markdown text

	Raises:
		UnknownNodeError: If the document holds an unsupported node
	"""
	out = io.StringIO()
	MarkdownRenderer().write(document, out)
	text = out.getvalue()
	if buf is not None:
		buf.write(text)
	return text
