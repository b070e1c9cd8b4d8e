"""
Report Data Model

Purpose: In-memory shape of an investigation report produced by the
alerting pipeline (alerts, attributes, investigation sections, result).

Responsibilities:
- Define Attribute, Alert, ReportResult, ReportSection and Report
- Define the entity and subject types found inside investigation sections
- Compute the attribute content fingerprint used for deduplication

Design notes:
- The fingerprint covers (type, key, value) only; context and timestamp
  never split one attribute into two
- Values are plain dataclasses; the body builder treats them as read-only
"""

import hashlib
import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

__all__ = [
	"ATTR_TYPES",
	"ATTR_CONTEXTS",
	"SEVERITIES",
	"STATUSES",
	"CONTENT_HOST",
	"CONTENT_USER",
	"CONTENT_BINARY",
	"CONTENT_TYPES",
	"Attribute",
	"Alert",
	"ReportResult",
	"ReportSection",
	"Report",
	"EntityDomain",
	"EntityURL",
	"EntityMalwareScan",
	"EntityMalware",
	"EntityActivity",
	"EntitySoftware",
	"ReportHost",
	"ReportUser",
	"ReportBinary",
	"attribute_fingerprint",
	"parse_timestamp",
]

# Known tag sets. The loader warns about values outside them but keeps them.
ATTR_TYPES = {"", "ipaddr", "domain", "username", "filehash", "json", "url"}
ATTR_CONTEXTS = {"remote", "local", "subject", "object", "client", "server"}
SEVERITIES = {"unclassified", "safe", "urgent"}
STATUSES = {"new", "published"}

CONTENT_HOST = "host"
CONTENT_USER = "user"
CONTENT_BINARY = "binary"
CONTENT_TYPES = (CONTENT_HOST, CONTENT_USER, CONTENT_BINARY)

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: Any) -> Optional[datetime]:
	"""
	Parse an ISO-8601 timestamp. A trailing "Z" means UTC. Fractional
	seconds beyond microseconds are truncated.

	Returns None for None or empty strings; datetimes pass through.

	Raises:
		ValueError: If value is not a parseable timestamp
	"""
	if value is None or value == "":
		return None
	if isinstance(value, datetime):
		return value
	if not isinstance(value, str):
		raise ValueError(f"timestamp must be an ISO-8601 string, got {type(value).__name__}")
	text = value.strip()
	if text.endswith("Z"):
		text = text[:-1] + "+00:00"
	# fromisoformat before 3.11 only takes 3 or 6 fractional digits; nanoseconds are cut
	text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
	try:
		return datetime.fromisoformat(text)
	except ValueError:
		raise ValueError(f"invalid timestamp: {value!r}") from None


def attribute_fingerprint(attr_type: str, key: str, value: str) -> str:
	"""
	Deterministic content fingerprint of an attribute.

	SHA-256 hex digest of the compact JSON array [type, key, value]. JSON
	encoding keeps field boundaries unambiguous (no separator collisions).
	"""
	payload = json.dumps([attr_type, key, value], ensure_ascii=False, separators=(",", ":"))
	return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Attribute:
	key: str
	value: str
	type: str = ""
	context: tuple = ()
	timestamp: Optional[datetime] = None

	def hash(self) -> str:
		return attribute_fingerprint(self.type, self.key, self.value)


@dataclass
class Alert:
	detector: str
	rule_name: str
	description: str = ""
	timestamp: Optional[datetime] = None
	attributes: List[Attribute] = field(default_factory=list)
	rule_id: str = ""
	alert_key: str = ""


@dataclass
class ReportResult:
	severity: str = "unclassified"
	reason: str = ""


@dataclass
class ReportSection:
	"""One investigation finding about a single subject attribute."""

	author: str
	attribute: Attribute
	type: str
	content: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Report:
	id: str
	alerts: List[Alert] = field(default_factory=list)
	sections: List[ReportSection] = field(default_factory=list)
	result: ReportResult = field(default_factory=ReportResult)
	status: str = "new"
	created_at: Optional[datetime] = None


# ============================================================================
# Entities found inside investigation sections
# ============================================================================

@dataclass
class EntityDomain:
	name: str
	timestamp: Optional[datetime] = None
	source: str = ""


@dataclass
class EntityURL:
	url: str
	reference: str = ""
	timestamp: Optional[datetime] = None
	source: str = ""


@dataclass
class EntityMalwareScan:
	vendor: str
	name: str = ""
	positive: bool = True
	source: str = ""


@dataclass
class EntityMalware:
	sha256: str
	timestamp: Optional[datetime] = None
	scans: List[EntityMalwareScan] = field(default_factory=list)
	relation: str = ""


@dataclass
class EntityActivity:
	service_name: str = ""
	remote_addr: str = ""
	principal: str = ""
	action: str = ""
	target: str = ""
	last_seen: Optional[datetime] = None


@dataclass
class EntitySoftware:
	name: str
	location: str = ""
	last_seen: Optional[datetime] = None


@dataclass
class ReportHost:
	ipaddr: List[str] = field(default_factory=list)
	country: List[str] = field(default_factory=list)
	as_owner: List[str] = field(default_factory=list)
	related_domains: List[EntityDomain] = field(default_factory=list)
	related_urls: List[EntityURL] = field(default_factory=list)
	related_malware: List[EntityMalware] = field(default_factory=list)
	activities: List[EntityActivity] = field(default_factory=list)
	user_name: List[str] = field(default_factory=list)
	owner: List[str] = field(default_factory=list)
	os: List[str] = field(default_factory=list)
	mac_addr: List[str] = field(default_factory=list)
	host_name: List[str] = field(default_factory=list)
	software: List[EntitySoftware] = field(default_factory=list)


@dataclass
class ReportUser:
	activities: List[EntityActivity] = field(default_factory=list)


@dataclass
class ReportBinary:
	related_malware: List[EntityMalware] = field(default_factory=list)
	software: List[str] = field(default_factory=list)
	os: List[str] = field(default_factory=list)
	activities: List[EntityActivity] = field(default_factory=list)
