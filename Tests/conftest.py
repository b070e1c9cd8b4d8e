"""
Pytest Configuration and Shared Fixtures

Provides reusable test fixtures for all test modules:
- Attributes, alerts and reports in their in-memory shape
- Report JSON for loader and CLI tests
- Temporary directories and config files
"""

import pytest
import os
import sys
import copy
import json
from datetime import datetime
from typing import Dict, Any

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from IssueBody.Report.models import (
    Alert,
    Attribute,
    Report,
    ReportResult,
    ReportSection,
)


# ============================================================================
# Attribute / Alert Fixtures
# ============================================================================

@pytest.fixture
def source_attr() -> Attribute:
    """Remote IP address attribute shared by several alerts."""
    return Attribute(type="ipaddr", key="source", value="192.168.0.1", context=("remote",))


@pytest.fixture
def user_attr() -> Attribute:
    """User name attribute."""
    return Attribute(type="username", key="name", value="blue", context=("remote",))


@pytest.fixture
def fixed_time() -> datetime:
    """Fixed detection time for deterministic output."""
    return datetime(2025, 12, 10, 10, 0, 0)


@pytest.fixture
def two_alerts(source_attr, fixed_time):
    """Two alerts sharing one identical attribute."""
    return [
        Alert(
            detector="blue",
            rule_name="orange",
            alert_key="five",
            description="not sane",
            timestamp=fixed_time,
            attributes=[source_attr],
        ),
        Alert(
            detector="blue",
            rule_name="orange",
            alert_key="five",
            description="timeless",
            timestamp=datetime(2025, 12, 10, 11, 30, 0),
            attributes=[Attribute(type="ipaddr", key="source", value="192.168.0.1", context=("local",))],
        ),
    ]


# ============================================================================
# Report Fixtures
# ============================================================================

@pytest.fixture
def investigation_sections(source_attr, user_attr, fixed_time):
    """Host and user sections, two findings about the same host."""
    return [
        ReportSection(
            author="Familiar1",
            attribute=source_attr,
            type="host",
            content={
                "related_domains": [
                    {"name": "example.com", "timestamp": "2025-12-09T08:00:00", "source": "tester"},
                ],
            },
        ),
        ReportSection(
            author="Familiar2",
            attribute=source_attr,
            type="host",
            content={
                "ipaddr": ["10.0.1.2"],
                "related_domains": [
                    {"name": "example.net", "timestamp": "2025-12-09T09:00:00", "source": "tester"},
                ],
            },
        ),
        ReportSection(
            author="SomeVirusScanner",
            attribute=Attribute(type="ipaddr", key="source", value="192.168.0.2"),
            type="host",
            content={
                "related_malware": [
                    {
                        "sha256": "abcdefg",
                        "scans": [
                            {"vendor": "normalVender", "name": "some_malware"},
                            {"vendor": "superVender", "name": "some_malware2"},
                        ],
                    },
                ],
            },
        ),
        ReportSection(
            author="xxxx",
            attribute=user_attr,
            type="user",
            content={
                "activities": [
                    {"service_name": "magic", "remote_addr": "10.2.3.4"},
                ],
            },
        ),
    ]


@pytest.fixture
def full_report(two_alerts, investigation_sections) -> Report:
    """Report with two alerts and host/user investigation sections."""
    return Report(
        id="4f7c1a52-1d2e-4b8a-a0f1-000000000001",
        alerts=two_alerts,
        sections=investigation_sections,
        result=ReportResult(severity="unclassified", reason="It's test"),
        status="published",
    )


@pytest.fixture
def minimal_report(fixed_time) -> Report:
    """Report with one attribute-less alert and no sections."""
    return Report(
        id="report-min",
        alerts=[Alert(detector="d", rule_name="r", description="desc", timestamp=fixed_time)],
        result=ReportResult(severity="safe", reason="nothing"),
        status="new",
    )


@pytest.fixture
def raw_report() -> Dict[str, Any]:
    """Report JSON as delivered by the alerting pipeline."""
    return {
        "id": "report-001",
        "status": "new",
        "created_at": "2025-12-10T10:05:00Z",
        "result": {"severity": "urgent", "reason": "C2 traffic"},
        "alerts": [
            {
                "detector": "guardduty",
                "rule_name": "C2Activity",
                "description": "Queried a C2 domain",
                "timestamp": "2025-12-10T10:00:00Z",
                "attributes": [
                    {"type": "ipaddr", "key": "dst", "value": "198.51.100.7", "context": ["remote"]},
                    {"type": "", "key": "instance", "value": "i-0a1b2c3d"},
                ],
            }
        ],
        "sections": [
            {
                "author": "ipinfo",
                "type": "host",
                "attribute": {"type": "ipaddr", "key": "dst", "value": "198.51.100.7"},
                "content": {"country": ["NL"]},
            }
        ],
    }


# ============================================================================
# Temporary Directory / File Fixtures
# ============================================================================

@pytest.fixture
def temp_output_dir(tmp_path):
    """Temporary output directory for rendered bodies."""
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    yield str(output_dir)


@pytest.fixture
def create_temp_report_file(tmp_path):
    """Factory fixture to create temporary report JSON files."""
    def _create_file(report_data: Dict[str, Any], filename: str = "test_report.json") -> str:
        file_path = tmp_path / filename
        file_path.write_text(json.dumps(copy.deepcopy(report_data), indent=2))
        return str(file_path)
    return _create_file


@pytest.fixture
def create_temp_config(tmp_path):
    """Factory fixture to create temporary config.yml files."""
    def _create_config(content: str, filename: str = "config.yml") -> str:
        file_path = tmp_path / filename
        file_path.write_text(content)
        return str(file_path)
    return _create_config
