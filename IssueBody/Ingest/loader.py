'''
Report Ingestion

Purpose: Load investigation reports from disk and validate their structure.

Responsibilities:
- Read report JSON files
- Provide a sample report for demo/testing
- Convert validated JSON into Report values
- Warn about tags, severities and statuses outside the known sets

Why isolated:
- Reports arrive from the alerting pipeline in whatever envelope it uses
  (queue message, API payload, file); only this module knows about it
'''

import copy
import json
import os
from typing import Any, Dict, List, Optional

from IssueBody.Logging.logger import get_logger
from IssueBody.Report.models import (
	ATTR_CONTEXTS,
	ATTR_TYPES,
	CONTENT_TYPES,
	SEVERITIES,
	STATUSES,
	Alert,
	Attribute,
	Report,
	ReportResult,
	ReportSection,
	parse_timestamp,
)

__all__ = ["load_report", "load_report_data", "parse_report", "SAMPLE_REPORT"]

logger = get_logger(__name__)


SAMPLE_REPORT: Dict[str, Any] = {
	"id": "5b3e2a0c-8f1d-4d6e-9a57-2c4b1f0e9d31",
	"status": "published",
	"created_at": "2025-12-10T10:05:00Z",
	"result": {
		"severity": "urgent",
		"reason": "Known C2 address contacted from a workstation",
	},
	"alerts": [
		{
			"detector": "guardduty",
			"rule_name": "Backdoor:EC2/C&CActivity.B",
			"alert_key": "i-0a1b2c3d",
			"description": "Instance queried a known command and control server",
			"timestamp": "2025-12-10T10:00:00Z",
			"attributes": [
				{"type": "ipaddr", "key": "remote address", "value": "198.51.100.7", "context": ["remote"]},
				{"type": "", "key": "instance id", "value": "i-0a1b2c3d", "context": ["local"]},
				{"type": "json", "key": "finding", "value": "{\"count\": 3, \"port\": 443}"},
			],
		},
		{
			"detector": "guardduty",
			"rule_name": "Backdoor:EC2/C&CActivity.B",
			"alert_key": "i-0a1b2c3d",
			"description": "Repeated connection to the same server",
			"timestamp": "2025-12-10T10:03:00Z",
			"attributes": [
				{"type": "ipaddr", "key": "remote address", "value": "198.51.100.7", "context": ["remote"]},
			],
		},
	],
	"sections": [
		{
			"author": "ipinfo",
			"type": "host",
			"attribute": {"type": "ipaddr", "key": "remote address", "value": "198.51.100.7"},
			"content": {
				"ipaddr": ["198.51.100.7"],
				"country": ["NL"],
				"related_domains": [
					{"name": "c2.example.net", "timestamp": "2025-12-09T22:14:00Z", "source": "passive-dns"},
				],
			},
		},
		{
			"author": "virustotal",
			"type": "host",
			"attribute": {"type": "ipaddr", "key": "remote address", "value": "198.51.100.7"},
			"content": {
				"related_malware": [
					{
						"sha256": "0f343b0931126a20f133d67c2b018a3b1a3d2d8d1a7a4cbb2e3fb5a9c0e6d4f1",
						"scans": [
							{"vendor": "VendorA", "name": "Trojan.Agent", "positive": True},
							{"vendor": "VendorB", "name": "", "positive": False},
						],
					},
				],
			},
		},
	],
}


def _require(data: Dict[str, Any], field: str, where: str) -> Any:
	if field not in data:
		raise ValueError(f"{where} missing required field: '{field}'")
	return data[field]


def _require_str(data: Dict[str, Any], field: str, where: str, allow_empty: bool = False) -> str:
	value = _require(data, field, where)
	if not isinstance(value, str) or (not allow_empty and not value.strip()):
		kind = "a string" if allow_empty else "a non-empty string"
		raise ValueError(f"{where}['{field}'] must be {kind}")
	return value


def _optional_str(data: Dict[str, Any], field: str, where: str) -> str:
	value = data.get(field, "")
	if value is None:
		return ""
	if not isinstance(value, str):
		raise ValueError(f"{where}['{field}'] must be a string")
	return value


def _warn_unknown(value: str, known, what: str, where: str) -> str:
	# Unknown tags are kept; downstream rendering handles any string
	if value not in known:
		logger.warning("%s has unknown %s %r", where, what, value)
	return value


def _parse_attribute(data: Any, where: str) -> Attribute:
	if not isinstance(data, dict):
		raise ValueError(f"{where} must be a dictionary")
	context = data.get("context") or []
	if not isinstance(context, list) or not all(isinstance(c, str) for c in context):
		raise ValueError(f"{where}['context'] must be a list of strings")
	for c in context:
		_warn_unknown(c, ATTR_CONTEXTS, "attribute context", where)
	return Attribute(
		key=_require_str(data, "key", where),
		value=_require_str(data, "value", where, allow_empty=True),
		type=_warn_unknown(_optional_str(data, "type", where), ATTR_TYPES, "attribute type", where),
		context=tuple(context),
		timestamp=parse_timestamp(data.get("timestamp")),
	)


def _parse_list(data: Dict[str, Any], field: str, where: str) -> List[Any]:
	value = data.get(field) or []
	if not isinstance(value, list):
		raise ValueError(f"{where}['{field}'] must be a list")
	return value


def _parse_alert(data: Any, where: str) -> Alert:
	if not isinstance(data, dict):
		raise ValueError(f"{where} must be a dictionary")
	attributes = [
		_parse_attribute(attr, f"{where}.attributes[{idx}]")
		for idx, attr in enumerate(_parse_list(data, "attributes", where))
	]
	return Alert(
		detector=_require_str(data, "detector", where),
		rule_name=_require_str(data, "rule_name", where),
		description=_optional_str(data, "description", where),
		timestamp=parse_timestamp(data.get("timestamp")),
		attributes=attributes,
		rule_id=_optional_str(data, "rule_id", where),
		alert_key=_optional_str(data, "alert_key", where),
	)


def _parse_section(data: Any, where: str) -> ReportSection:
	# Section content is decoded later by the extractor; only the envelope is checked here
	if not isinstance(data, dict):
		raise ValueError(f"{where} must be a dictionary")
	return ReportSection(
		author=_optional_str(data, "author", where),
		attribute=_parse_attribute(_require(data, "attribute", where), f"{where}.attribute"),
		type=_warn_unknown(_require_str(data, "type", where), CONTENT_TYPES, "section type", where),
		content=data.get("content") or {},
	)


def parse_report(data: Dict[str, Any]) -> Report:
	"""
	Convert report JSON into a Report value.

	Args:
		data: Decoded report JSON

	Returns:
		Report value

	Raises:
		ValueError: If the structure is invalid
	"""
	if not isinstance(data, dict):
		raise ValueError("report must be a dictionary")

	result = data.get("result") or {}
	if not isinstance(result, dict):
		raise ValueError("report['result'] must be a dictionary")

	alerts = [
		_parse_alert(alert, f"alerts[{idx}]")
		for idx, alert in enumerate(_parse_list(data, "alerts", "report"))
	]
	sections = [
		_parse_section(section, f"sections[{idx}]")
		for idx, section in enumerate(_parse_list(data, "sections", "report"))
	]

	return Report(
		id=_require_str(data, "id", "report"),
		alerts=alerts,
		sections=sections,
		result=ReportResult(
			severity=_warn_unknown(_optional_str(result, "severity", "result") or "unclassified", SEVERITIES, "severity", "result"),
			reason=_optional_str(result, "reason", "result"),
		),
		status=_warn_unknown(_optional_str(data, "status", "report") or "new", STATUSES, "status", "report"),
		created_at=parse_timestamp(data.get("created_at")),
	)


def load_report_data(path: Optional[str] = None, use_sample: bool = False) -> Dict[str, Any]:
	"""
	Load raw report JSON from disk or return the sample.

	Raises:
		FileNotFoundError: If path does not point at a file
		json.JSONDecodeError: If the file is not valid JSON
	"""
	if use_sample:
		return copy.deepcopy(SAMPLE_REPORT)

	if not path or not os.path.isfile(path):
		raise FileNotFoundError(f"Report file not found: {path}")

	with open(path, "r", encoding="utf-8") as f:
		return json.load(f)


def load_report(path: Optional[str] = None, use_sample: bool = False) -> Report:
	"""Load and parse a report. See load_report_data and parse_report."""
	return parse_report(load_report_data(path=path, use_sample=use_sample))
