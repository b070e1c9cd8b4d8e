"""
Inspection Report Sections

Purpose: Render grouped investigation results (hosts, users, binaries) as
Markdown nodes.

Responsibilities:
- One "## <Kind>: <subject>" block per investigated subject, first-seen order
- Merge every finding about the same subject into one block
- Render entities (domains, URLs, malware, activities, software) as lists

Design notes:
- Consumes an already extracted ReportContentMap; never decodes sections
- Repeated facts about one subject are shown once
"""

from dataclasses import astuple
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from IssueBody.Config.config import DEFAULT_TIME_FORMAT
from IssueBody.Markdown.document import (
	Heading,
	List as MdList,
	ListItem,
	Literal,
	Node,
	to_code,
	to_literal,
)
from IssueBody.Report.models import (
	Attribute,
	EntityActivity,
	EntityDomain,
	EntityMalware,
	EntitySoftware,
	EntityURL,
	ReportBinary,
	ReportHost,
	ReportUser,
)

__all__ = ["InspectionBuilder", "join_as_code", "NO_FINDINGS"]

NO_FINDINGS = "No findings.\n\n"


def join_as_code(values: Sequence[str]) -> List[Node]:
	"""Inline code nodes separated by ", " literals."""
	nodes: List[Node] = []
	for i, value in enumerate(values):
		nodes.append(to_code(value))
		if i + 1 < len(values):
			nodes.append(to_literal(", "))
	return nodes


def _unique(items: Iterable[Any], key: Callable[[Any], Any] = None) -> List[Any]:
	seen = set()
	result = []
	for item in items:
		marker = key(item) if key else item
		if marker in seen:
			continue
		seen.add(marker)
		result.append(item)
	return result


def _merge(contents: Iterable[Any], name: str) -> List[Any]:
	merged: List[Any] = []
	for content in contents:
		merged.extend(getattr(content, name))
	return merged


class InspectionBuilder:
	"""Build inspection report nodes from extracted content."""

	HOST_FACTS = (
		("ipaddr", "IP address"),
		("country", "Country"),
		("as_owner", "AS owner"),
		("host_name", "Host name"),
		("mac_addr", "MAC address"),
		("os", "OS"),
		("owner", "Owner"),
		("user_name", "User name"),
	)

	def __init__(self, time_format: str = DEFAULT_TIME_FORMAT) -> None:
		self._time_format = time_format

	def _format_time(self, ts: Optional[datetime]) -> str:
		return ts.strftime(self._time_format) if ts else ""

	def _subject_heading(self, kind: str, fingerprint: str, attributes: Dict[str, Attribute]) -> Heading:
		attr = attributes.get(fingerprint)
		subject = attr.value if attr else fingerprint
		return Heading(2, (to_literal(f"{kind}: "), to_code(subject)))

	def _section(self, title: str, items: List[ListItem]) -> List[Node]:
		if not items:
			return []
		return [Heading(3, to_literal(title)), MdList(items=tuple(items))]

	# ------------------------------------------------------------------
	# Entity items
	# ------------------------------------------------------------------

	def domain_item(self, domain: EntityDomain) -> ListItem:
		nodes: List[Node] = [to_code(domain.name)]
		details = [d for d in (domain.source, self._format_time(domain.timestamp)) if d]
		if details:
			nodes.append(to_literal(f"({', '.join(details)})"))
		return ListItem(nodes)

	def url_item(self, url: EntityURL) -> ListItem:
		nodes: List[Node] = [to_code(url.url)]
		details = [d for d in (url.source, self._format_time(url.timestamp)) if d]
		if details:
			nodes.append(to_literal(f"({', '.join(details)})"))
		if url.reference:
			nodes.extend([to_literal("ref: "), to_code(url.reference)])
		return ListItem(nodes)

	def malware_item(self, malware: EntityMalware) -> ListItem:
		positives = [scan for scan in malware.scans if scan.positive]
		nodes: List[Node] = [to_code(malware.sha256)]
		if malware.scans:
			nodes.append(to_literal(f"{len(positives)}/{len(malware.scans)} positive"))
		for i, scan in enumerate(positives):
			nodes.append(to_literal(": " if i == 0 else ", "))
			nodes.append(to_literal(scan.vendor))
			if scan.name:
				nodes.append(to_code(scan.name))
		if malware.relation:
			nodes.append(to_literal(f" [{malware.relation}]"))
		ts = self._format_time(malware.timestamp)
		if ts:
			nodes.append(to_literal(f" ({ts})"))
		return ListItem(nodes)

	def activity_item(self, activity: EntityActivity) -> ListItem:
		nodes: List[Node] = [to_code(activity.service_name or "unknown")]
		if activity.remote_addr:
			nodes.extend([to_literal("from"), to_code(activity.remote_addr)])
		if activity.principal:
			nodes.extend([to_literal("by"), to_code(activity.principal)])
		action = " ".join(a for a in (activity.action, activity.target) if a)
		if action:
			nodes.append(to_literal(f": {action}"))
		ts = self._format_time(activity.last_seen)
		if ts:
			nodes.append(to_literal(f" (last seen {ts})"))
		return ListItem(nodes)

	def software_item(self, software: EntitySoftware) -> ListItem:
		nodes: List[Node] = [to_code(software.name)]
		if software.location:
			nodes.extend([to_literal("at"), to_code(software.location)])
		ts = self._format_time(software.last_seen)
		if ts:
			nodes.append(to_literal(f" (last seen {ts})"))
		return ListItem(nodes)

	def _malware_items(self, contents: Iterable[Any]) -> List[ListItem]:
		malware = _unique(_merge(contents, "related_malware"), key=lambda m: m.sha256)
		return [self.malware_item(m) for m in malware]

	def _activity_items(self, contents: Iterable[Any]) -> List[ListItem]:
		activities = _unique(_merge(contents, "activities"), key=astuple)
		return [self.activity_item(a) for a in activities]

	# ------------------------------------------------------------------
	# Subject groups
	# ------------------------------------------------------------------

	def build_host(self, fingerprint: str, hosts: List[ReportHost], attributes: Dict[str, Attribute]) -> List[Node]:
		nodes: List[Node] = [self._subject_heading("Host", fingerprint, attributes)]
		body: List[Node] = []

		facts = []
		for name, label in self.HOST_FACTS:
			values = _unique(_merge(hosts, name))
			if values:
				facts.append(ListItem([to_literal(f"{label}: ")] + join_as_code(values)))
		if facts:
			body.append(MdList(items=tuple(facts)))

		domains = _unique(_merge(hosts, "related_domains"), key=lambda d: d.name)
		urls = _unique(_merge(hosts, "related_urls"), key=lambda u: u.url)
		software = _unique(_merge(hosts, "software"), key=lambda s: (s.name, s.location))

		body.extend(self._section("Related Domains", [self.domain_item(d) for d in domains]))
		body.extend(self._section("Related URLs", [self.url_item(u) for u in urls]))
		body.extend(self._section("Related Malware", self._malware_items(hosts)))
		body.extend(self._section("Activities", self._activity_items(hosts)))
		body.extend(self._section("Software", [self.software_item(s) for s in software]))

		return nodes + (body or [Literal(NO_FINDINGS)])

	def build_user(self, fingerprint: str, users: List[ReportUser], attributes: Dict[str, Attribute]) -> List[Node]:
		nodes: List[Node] = [self._subject_heading("User", fingerprint, attributes)]
		body = self._section("Activities", self._activity_items(users))
		return nodes + (body or [Literal(NO_FINDINGS)])

	def build_binary(self, fingerprint: str, binaries: List[ReportBinary], attributes: Dict[str, Attribute]) -> List[Node]:
		nodes: List[Node] = [self._subject_heading("Binary", fingerprint, attributes)]
		body: List[Node] = []
		body.extend(self._section("Related Malware", self._malware_items(binaries)))
		body.extend(self._section("Software", [ListItem(to_code(s)) for s in _unique(_merge(binaries, "software"))]))
		body.extend(self._section("OS", [ListItem(to_code(s)) for s in _unique(_merge(binaries, "os"))]))
		body.extend(self._section("Activities", self._activity_items(binaries)))
		return nodes + (body or [Literal(NO_FINDINGS)])

	def build_hosts(self, hosts: Dict[str, List[ReportHost]], attributes: Dict[str, Attribute]) -> List[Node]:
		nodes: List[Node] = []
		for fingerprint, contents in hosts.items():
			nodes.extend(self.build_host(fingerprint, contents, attributes))
		return nodes

	def build_users(self, users: Dict[str, List[ReportUser]], attributes: Dict[str, Attribute]) -> List[Node]:
		nodes: List[Node] = []
		for fingerprint, contents in users.items():
			nodes.extend(self.build_user(fingerprint, contents, attributes))
		return nodes

	def build_binaries(self, binaries: Dict[str, List[ReportBinary]], attributes: Dict[str, Attribute]) -> List[Node]:
		nodes: List[Node] = []
		for fingerprint, contents in binaries.items():
			nodes.extend(self.build_binary(fingerprint, contents, attributes))
		return nodes
