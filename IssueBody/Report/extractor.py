"""
Investigation Content Extractor

Purpose: Turn a report's raw investigation sections into per-subject
groupings (hosts / users / binaries) keyed by subject fingerprint.

Responsibilities:
- Decode raw section content into ReportHost / ReportUser / ReportBinary
- Group decoded contents by the fingerprint of the investigated attribute
- Keep the shared attribute context (fingerprint -> Attribute)

Design notes:
- Any malformed section fails the whole extraction with ExtractionError;
  the body builder decides how to degrade
- Grouping keeps first-seen order so output is deterministic
"""

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Type

from IssueBody.Report.models import (
	CONTENT_BINARY,
	CONTENT_HOST,
	CONTENT_USER,
	Attribute,
	EntityActivity,
	EntityDomain,
	EntityMalware,
	EntityMalwareScan,
	EntitySoftware,
	EntityURL,
	Report,
	ReportBinary,
	ReportHost,
	ReportSection,
	ReportUser,
	parse_timestamp,
)

__all__ = ["ContentExtractor", "ReportContentMap", "ExtractionError"]


class ExtractionError(Exception):
	"""Raised when investigation sections cannot be decoded."""


@dataclass
class ReportContentMap:
	attributes: Dict[str, Attribute] = field(default_factory=dict)
	hosts: Dict[str, List[ReportHost]] = field(default_factory=dict)
	users: Dict[str, List[ReportUser]] = field(default_factory=dict)
	binaries: Dict[str, List[ReportBinary]] = field(default_factory=dict)

	def __len__(self) -> int:
		return len(self.hosts) + len(self.users) + len(self.binaries)


def _str_list(value: Any, name: str) -> List[str]:
	if value is None:
		return []
	if not isinstance(value, list):
		raise ExtractionError(f"'{name}' must be a list")
	for item in value:
		if not isinstance(item, str):
			raise ExtractionError(f"'{name}' entries must be strings")
	return list(value)


def _timestamp(value: Any, name: str):
	try:
		return parse_timestamp(value)
	except ValueError as e:
		raise ExtractionError(f"'{name}': {e}") from e


def _entity(cls: Type, data: Any, name: str, nested: Dict[str, Callable[[Any, str], Any]] = None) -> Any:
	"""Build one entity dataclass from a mapping, ignoring unknown keys."""
	if isinstance(data, cls):
		return data
	if not isinstance(data, dict):
		raise ExtractionError(f"'{name}' entries must be objects")
	nested = nested or {}
	kwargs = {}
	for f in fields(cls):
		if f.name not in data:
			continue
		raw = data[f.name]
		if f.name in nested:
			kwargs[f.name] = nested[f.name](raw, f"{name}.{f.name}")
		elif f.name in ("timestamp", "last_seen"):
			kwargs[f.name] = _timestamp(raw, f"{name}.{f.name}")
		elif f.name == "positive":
			if not isinstance(raw, bool):
				raise ExtractionError(f"'{name}.{f.name}' must be a boolean")
			kwargs[f.name] = raw
		else:
			if raw is not None and not isinstance(raw, str):
				raise ExtractionError(f"'{name}.{f.name}' must be a string")
			kwargs[f.name] = raw or ""
	try:
		return cls(**kwargs)
	except TypeError as e:
		raise ExtractionError(f"'{name}' is missing required fields: {e}") from e


def _entity_list(cls: Type, nested: Dict[str, Callable[[Any, str], Any]] = None) -> Callable[[Any, str], List[Any]]:
	def _decode(value: Any, name: str) -> List[Any]:
		if value is None:
			return []
		if not isinstance(value, list):
			raise ExtractionError(f"'{name}' must be a list")
		return [_entity(cls, item, name, nested) for item in value]
	return _decode


_scans = _entity_list(EntityMalwareScan)
_malware = _entity_list(EntityMalware, {"scans": _scans})
_activities = _entity_list(EntityActivity)
_domains = _entity_list(EntityDomain)
_urls = _entity_list(EntityURL)
_software = _entity_list(EntitySoftware)

_HOST_FIELDS: Dict[str, Callable[[Any, str], Any]] = {
	"ipaddr": _str_list,
	"country": _str_list,
	"as_owner": _str_list,
	"related_domains": _domains,
	"related_urls": _urls,
	"related_malware": _malware,
	"activities": _activities,
	"user_name": _str_list,
	"owner": _str_list,
	"os": _str_list,
	"mac_addr": _str_list,
	"host_name": _str_list,
	"software": _software,
}

_USER_FIELDS: Dict[str, Callable[[Any, str], Any]] = {
	"activities": _activities,
}

_BINARY_FIELDS: Dict[str, Callable[[Any, str], Any]] = {
	"related_malware": _malware,
	"software": _str_list,
	"os": _str_list,
	"activities": _activities,
}


class ContentExtractor:
	"""Default extraction collaborator for the body builder."""

	_DECODERS = {
		CONTENT_HOST: (ReportHost, _HOST_FIELDS),
		CONTENT_USER: (ReportUser, _USER_FIELDS),
		CONTENT_BINARY: (ReportBinary, _BINARY_FIELDS),
	}

	def decode_section(self, section: ReportSection) -> Any:
		"""
		Decode the raw content of one section.

		Returns:
			ReportHost, ReportUser or ReportBinary depending on section.type

		Raises:
			ExtractionError: If the type is unknown or the content is malformed
		"""
		if section.type not in self._DECODERS:
			raise ExtractionError(f"unknown section type: {section.type!r} (author: {section.author})")

		cls, decoders = self._DECODERS[section.type]
		content = section.content
		if isinstance(content, cls):
			return content
		if not isinstance(content, dict):
			raise ExtractionError(f"{section.type} section content must be an object (author: {section.author})")

		kwargs = {}
		for name, decode in decoders.items():
			if name in content:
				kwargs[name] = decode(content[name], name)
		return cls(**kwargs)

	def extract(self, report: Report) -> ReportContentMap:
		"""Group every section of report by subject kind and fingerprint."""
		content_map = ReportContentMap()
		groups = {
			CONTENT_HOST: content_map.hosts,
			CONTENT_USER: content_map.users,
			CONTENT_BINARY: content_map.binaries,
		}

		for section in report.sections:
			decoded = self.decode_section(section)
			fingerprint = section.attribute.hash()
			content_map.attributes.setdefault(fingerprint, section.attribute)
			groups[section.type].setdefault(fingerprint, []).append(decoded)

		return content_map

	def __call__(self, report: Report) -> ReportContentMap:
		return self.extract(report)
