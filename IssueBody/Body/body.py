"""
Issue Body Builder

Purpose: Transform an investigation report into the Markdown body posted
as a GitHub issue or comment.

Responsibilities:
- Summary: result, first alert's detector and rule, attributes of all alerts
- Inspection Reports: hosts, users and binaries from extracted sections
- Detail of Alerts: one block per alert with its own attributes
- System Info: report ID and status

Design notes:
- Sections are built in a fixed order and appended to one Document
- Extraction failures drop the Inspection Reports section only, after logging
- Empty alert lists are rejected (MissingAlertData), never read past
"""

import io
import logging
from typing import Callable, List, Optional

from IssueBody.Body.attributes import build_attribute_list
from IssueBody.Body.inspections import InspectionBuilder
from IssueBody.Config.config import RenderConfigLoader, get_config
from IssueBody.Logging.logger import get_logger
from IssueBody.Markdown.document import (
	Document,
	Heading,
	HorizontalRule,
	List as MdList,
	ListItem,
	Node,
	to_bold,
	to_code,
	to_literal,
)
from IssueBody.Report.extractor import ContentExtractor, ReportContentMap
from IssueBody.Report.models import Alert, Report

__all__ = ["ReportBodyBuilder", "MissingAlertData", "report_to_body"]

Extractor = Callable[[Report], ReportContentMap]


class MissingAlertData(ValueError):
	"""Raised when a report has no alert to summarize."""


class ReportBodyBuilder:
	"""Build the issue body Document for a report."""

	def __init__(
		self,
		logger: Optional[logging.Logger] = None,
		extractor: Optional[Extractor] = None,
		config: Optional[RenderConfigLoader] = None,
	) -> None:
		self._logger = logger or get_logger(__name__)
		self._extract = extractor or ContentExtractor()
		self._config = config or get_config()
		self._inspections = InspectionBuilder(self._config.time_format)

	def _attribute_list(self, attributes) -> MdList:
		return build_attribute_list(attributes, self._config.json_indent, self._logger)

	def _first_alert(self, report: Report) -> Alert:
		if not report.alerts:
			raise MissingAlertData(f"report {report.id} has no alerts")
		return report.alerts[0]

	def build_summary(self, report: Report) -> List[Node]:
		"""Summary block plus attributes deduplicated across every alert."""
		first = self._first_alert(report)
		all_attributes = [attr for alert in report.alerts for attr in alert.attributes]

		return [
			Heading(1, to_literal("Summary")),
			MdList(items=(
				ListItem((to_literal("Severity: "), to_bold(report.result.severity))),
				ListItem((to_literal("Reason: "), to_literal(report.result.reason))),
				ListItem((to_literal("Detected by "), to_code(first.detector))),
				ListItem((to_literal("Rule: "), to_code(first.rule_name))),
			)),
			Heading(2, to_literal("Attributes")),
			self._attribute_list(all_attributes),
		]

	def build_inspections(self, report: Report) -> List[Node]:
		"""
		Inspection Reports section.

		Returns an empty list (and logs the error) if extraction fails.
		"""
		try:
			content_map = self._extract(report)
		except Exception:
			self._logger.exception("Fail to extract contents from report %s", report.id)
			return []

		self._logger.debug(
			"Report map for %s: %d hosts, %d users, %d binaries",
			report.id, len(content_map.hosts), len(content_map.users), len(content_map.binaries),
		)

		nodes: List[Node] = [Heading(1, to_literal("Inspection Reports"))]
		nodes.extend(self._inspections.build_hosts(content_map.hosts, content_map.attributes))
		nodes.extend(self._inspections.build_users(content_map.users, content_map.attributes))
		nodes.extend(self._inspections.build_binaries(content_map.binaries, content_map.attributes))
		return nodes

	def _format_timestamp(self, alert: Alert) -> str:
		if alert.timestamp is None:
			return ""
		return alert.timestamp.strftime(self._config.time_format)

	def build_alerts(self, report: Report) -> List[Node]:
		"""Detail of Alerts; attributes are deduplicated per alert only."""
		nodes: List[Node] = [Heading(1, to_literal("Detail of Alerts"))]

		for alert in report.alerts:
			nodes.extend([
				MdList(items=(
					ListItem((to_literal("Description: "), to_literal(alert.description))),
					ListItem((to_literal("Detected at: "), to_code(self._format_timestamp(alert)))),
				)),
				Heading(2, to_literal("Attributes")),
				self._attribute_list(alert.attributes),
				HorizontalRule(),
			])

		return nodes

	def build_system_info(self, report: Report) -> List[Node]:
		return [
			Heading(1, to_literal("System Info")),
			MdList(items=(
				ListItem((to_literal("ReportID: "), to_code(report.id))),
				ListItem((to_literal("Status: "), to_code(report.status))),
			)),
		]

	def build(self, report: Report) -> Document:
		"""
		Build the full document.

		Raises:
			MissingAlertData: If the report has no alerts
		"""
		doc = Document()
		doc.extend(self.build_summary(report))
		doc.extend(self.build_inspections(report))
		doc.extend(self.build_alerts(report))
		doc.extend(self.build_system_info(report))
		return doc


def report_to_body(
	report: Report,
	logger: Optional[logging.Logger] = None,
	extractor: Optional[Extractor] = None,
	config: Optional[RenderConfigLoader] = None,
) -> io.StringIO:
	"""
	Render a report as a Markdown issue body.

	Args:
		report: Investigation report
		logger: Logger for degraded sections (defaults to the module logger)
		extractor: Investigation content extractor (defaults to ContentExtractor)
		config: Render configuration (defaults to the bundled config.yml)

	Returns:
		Text buffer holding the Markdown body, positioned at the start

	Raises:
		MissingAlertData: If the report has no alerts
		UnknownNodeError: If a node without a rendering rule reaches the renderer
	"""
	doc = ReportBodyBuilder(logger=logger, extractor=extractor, config=config).build(report)

	buf = io.StringIO()
	doc.render(buf)
	buf.seek(0)
	return buf
