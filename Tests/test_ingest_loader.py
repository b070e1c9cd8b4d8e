"""
Unit Tests for IssueBody/Ingest/loader.py

Tests report ingestion from JSON files, sample report handling and
structural validation.
"""

import pytest
import os
import sys
import json
import logging
from datetime import datetime, timezone

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from IssueBody.Ingest.loader import SAMPLE_REPORT, load_report, load_report_data, parse_report
from IssueBody.Report.models import Report


class TestLoadSampleReport:
    """Test suite for load_report() with the sample flag."""

    def test_sample_report_parses(self):
        """Test that the bundled sample is a valid report."""
        report = load_report(use_sample=True)
        assert isinstance(report, Report)
        assert report.id == SAMPLE_REPORT["id"]
        assert len(report.alerts) == 2
        assert len(report.sections) == 2

    def test_sample_data_is_a_copy(self):
        """Test that loading the sample does not expose SAMPLE_REPORT."""
        data = load_report_data(use_sample=True)
        data["id"] = "modified"
        data["alerts"][0]["detector"] = "modified"

        assert SAMPLE_REPORT["id"] != "modified"
        assert SAMPLE_REPORT["alerts"][0]["detector"] == "guardduty"

    def test_sample_flag_overrides_path(self):
        """Test that the sample flag ignores the path."""
        report = load_report(path="/nonexistent/report.json", use_sample=True)
        assert report.id == SAMPLE_REPORT["id"]


class TestLoadReportFromFile:
    """Test suite for load_report() with a file path."""

    def test_load_valid_file(self, create_temp_report_file, raw_report):
        """Test loading a valid report file."""
        report = load_report(path=create_temp_report_file(raw_report))

        assert report.id == "report-001"
        assert report.result.severity == "urgent"
        assert report.alerts[0].detector == "guardduty"
        assert report.alerts[0].timestamp == datetime(2025, 12, 10, 10, 0, tzinfo=timezone.utc)
        assert report.alerts[0].attributes[0].context == ("remote",)
        assert report.sections[0].type == "host"
        assert report.sections[0].content == {"country": ["NL"]}

    def test_file_not_found_raises(self):
        with pytest.raises(FileNotFoundError, match="Report file not found"):
            load_report(path="/nonexistent/report.json")

    def test_none_path_raises(self):
        with pytest.raises(FileNotFoundError, match="Report file not found"):
            load_report()

    def test_directory_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Report file not found"):
            load_report(path=str(tmp_path))

    def test_malformed_json_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            load_report(path=str(path))


class TestParseReport:
    """Test suite for parse_report() validation."""

    def test_defaults_for_optional_fields(self):
        """Test defaults when optional fields are missing."""
        report = parse_report({"id": "r"})

        assert report.alerts == []
        assert report.sections == []
        assert report.result.severity == "unclassified"
        assert report.status == "new"
        assert report.created_at is None

    def test_empty_attribute_type_is_kept(self, raw_report):
        report = parse_report(raw_report)
        assert report.alerts[0].attributes[1].type == ""

    def test_non_dict_raises(self):
        with pytest.raises(ValueError, match="report must be a dictionary"):
            parse_report(["not", "a", "dict"])

    def test_missing_id_raises(self, raw_report):
        del raw_report["id"]
        with pytest.raises(ValueError, match="missing required field: 'id'"):
            parse_report(raw_report)

    def test_missing_detector_raises(self, raw_report):
        del raw_report["alerts"][0]["detector"]
        with pytest.raises(ValueError, match=r"alerts\[0\] missing required field: 'detector'"):
            parse_report(raw_report)

    def test_attribute_without_key_raises(self, raw_report):
        del raw_report["alerts"][0]["attributes"][0]["key"]
        with pytest.raises(ValueError, match=r"alerts\[0\]\.attributes\[0\]"):
            parse_report(raw_report)

    def test_alerts_must_be_list(self, raw_report):
        raw_report["alerts"] = {"detector": "x"}
        with pytest.raises(ValueError, match="must be a list"):
            parse_report(raw_report)

    def test_invalid_timestamp_raises(self, raw_report):
        raw_report["alerts"][0]["timestamp"] = "last tuesday"
        with pytest.raises(ValueError, match="invalid timestamp"):
            parse_report(raw_report)

    @pytest.mark.parametrize("stamp, micro", [
        ("2025-12-10T10:00:00.123456789Z", 123456),
        ("2025-12-10T10:00:00.1Z", 100000),
    ])
    def test_fractional_seconds_are_normalized(self, raw_report, stamp, micro):
        """Test nanosecond and single-digit fractions parse to microseconds."""
        raw_report["alerts"][0]["timestamp"] = stamp
        report = parse_report(raw_report)
        assert report.alerts[0].timestamp == datetime(2025, 12, 10, 10, 0, 0, micro, tzinfo=timezone.utc)

    def test_context_must_be_strings(self, raw_report):
        raw_report["alerts"][0]["attributes"][0]["context"] = [1]
        with pytest.raises(ValueError, match="context"):
            parse_report(raw_report)

    def test_section_without_attribute_raises(self, raw_report):
        del raw_report["sections"][0]["attribute"]
        with pytest.raises(ValueError, match=r"sections\[0\] missing required field: 'attribute'"):
            parse_report(raw_report)

    def test_unknown_tags_are_kept_and_warned(self, raw_report, caplog):
        """Test that values outside the known sets parse but log a warning."""
        raw_report["alerts"][0]["attributes"][0]["type"] = "macaddr"
        raw_report["alerts"][0]["attributes"][0]["context"] = ["sideways"]
        raw_report["result"] = {"severity": "spicy"}
        raw_report["status"] = "archived"
        with caplog.at_level(logging.WARNING, logger="IssueBody.Ingest.loader"):
            report = parse_report(raw_report)

        assert report.alerts[0].attributes[0].type == "macaddr"
        assert report.result.severity == "spicy"
        assert report.status == "archived"
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert any("unknown attribute type 'macaddr'" in m for m in messages)
        assert any("unknown attribute context 'sideways'" in m for m in messages)
        assert any("unknown severity 'spicy'" in m for m in messages)
        assert any("unknown status 'archived'" in m for m in messages)

    def test_known_tags_do_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="IssueBody.Ingest.loader"):
            load_report(use_sample=True)
        assert not [r for r in caplog.records if r.name == "IssueBody.Ingest.loader"]
