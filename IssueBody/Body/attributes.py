"""
Attribute Rendering

Purpose: Turn report attributes into Markdown list items.

Responsibilities:
- Classify an attribute's type tag (empty / json / other)
- Pretty-print json attribute values, falling back to the raw text
- Build attribute lists deduplicated by content fingerprint

Design notes:
- First occurrence wins; later duplicates are dropped silently
- Malformed json is never an error, only a debug record
"""

import enum
import json
import logging
from typing import Iterable, List, Optional

from IssueBody.Config.config import DEFAULT_JSON_INDENT
from IssueBody.Markdown.document import (
	Contents,
	List as MdList,
	ListItem,
	to_code,
	to_code_block,
	to_literal,
)
from IssueBody.Report.models import Attribute

__all__ = [
	"AttrKind",
	"classify_attribute",
	"pretty_json",
	"attr_to_contents",
	"dedup_attributes",
	"build_attribute_list",
]

JSON_TYPE = "json"

_logger = logging.getLogger(__name__)


class AttrKind(enum.Enum):
	EMPTY = "empty"
	JSON = "json"
	OTHER = "other"


def classify_attribute(attr: Attribute) -> AttrKind:
	"""Map an attribute's type tag onto the closed set of rendering kinds."""
	if not attr.type:
		return AttrKind.EMPTY
	if attr.type == JSON_TYPE:
		return AttrKind.JSON
	return AttrKind.OTHER


def _reject_constant(name: str) -> None:
	raise ValueError(f"{name} is not valid json")


def _reindent(value: str, indent: int) -> str:
	"""Re-indent valid JSON text token by token; numbers and escapes stay as written."""
	pad = " " * indent
	out = []
	depth = 0
	in_string = False
	escaped = False
	opened = False

	for ch in value:
		if in_string:
			out.append(ch)
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue
		if ch in " \t\r\n":
			continue

		if opened:
			opened = False
			if ch in "]}":
				# Empty container stays on one line
				depth -= 1
				out.append(ch)
				continue
			out.append("\n" + pad * depth)

		if ch == '"':
			in_string = True
			out.append(ch)
		elif ch in "[{":
			out.append(ch)
			depth += 1
			opened = True
		elif ch in "]}":
			depth -= 1
			out.append("\n" + pad * depth + ch)
		elif ch == ",":
			out.append(",\n" + pad * depth)
		elif ch == ":":
			out.append(": ")
		else:
			out.append(ch)

	return "".join(out)


def pretty_json(value: str, indent: int = DEFAULT_JSON_INDENT, logger: Optional[logging.Logger] = None) -> str:
	"""
	Re-indent a JSON document.

	Only whitespace changes: key order, number text, escapes and non-ASCII
	text are kept. If value is not valid JSON (NaN and Infinity included) or
	is nested too deeply to decode, the raw value is returned unchanged.
	"""
	try:
		json.loads(value, parse_constant=_reject_constant)
	except (TypeError, ValueError, RecursionError) as e:
		(logger or _logger).debug("attribute value is not valid json, rendering raw: %s", e)
		return value
	return _reindent(value, indent)


def attr_to_contents(attr: Attribute, json_indent: int = DEFAULT_JSON_INDENT, logger: Optional[logging.Logger] = None) -> Contents:
	"""Inline nodes for one attribute: key, type marker and value."""
	kind = classify_attribute(attr)
	nodes = [to_literal(attr.key)]

	if kind is AttrKind.EMPTY:
		nodes.extend([
			to_literal(": "),
			to_code(attr.value),
		])
	elif kind is AttrKind.JSON:
		nodes.extend([
			to_literal(f" ({JSON_TYPE}): \n"),
			to_code_block(pretty_json(attr.value, json_indent, logger)),
			to_literal("\n"),
		])
	else:
		nodes.extend([
			to_literal(f" ({attr.type}): "),
			to_code(attr.value),
		])

	return tuple(nodes)


def dedup_attributes(attributes: Iterable[Attribute]) -> List[Attribute]:
	"""Keep the first attribute of every fingerprint, in first-seen order."""
	seen = set()
	result = []
	for attr in attributes:
		fingerprint = attr.hash()
		if fingerprint in seen:
			continue
		seen.add(fingerprint)
		result.append(attr)
	return result


def build_attribute_list(attributes: Iterable[Attribute], json_indent: int = DEFAULT_JSON_INDENT, logger: Optional[logging.Logger] = None) -> MdList:
	"""
	Build a deduplicated attribute list node.

	An empty input still yields a List node, with zero items.
	"""
	return MdList(items=tuple(
		ListItem(attr_to_contents(attr, json_indent, logger))
		for attr in dedup_attributes(attributes)
	))
