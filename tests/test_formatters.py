"""Tests for the human and JSON result formatters."""

import json

import pytest

from quay_scanner.core.formatters import (
    ConsoleFormatter,
    JsonFormatter,
    get_all_formatters,
    get_formatter,
)
from quay_scanner.core.config import OUTPUT_FORMATS
from quay_scanner.core.formatters.console import SECTION_SEPARATOR, vulnerability_rows
from quay_scanner.core.quay import VulnerabilityReport
from quay_scanner.core.scanner import ImageScanResult


ETCD = "quay.io/coreos/etcd:v3.5.0"
BROKEN = "quay.io/coreos/broken:latest"


def _report(features=None, status="scanned"):
    return VulnerabilityReport.from_dict({
        "status": status,
        "data": {"Layer": {"Features": features or []}},
    })


def _etcd_report():
    return _report([
        {
            "Name": "openssl",
            "Version": "1.1.1n",
            "Vulnerabilities": [
                {"Name": "CVE-2021-1234", "Severity": "High", "FixedBy": "1.1.1o",
                 "Link": "https://example.com/CVE-2021-1234"},
                {"Name": "CVE-2022-0001", "Severity": "Low"},
            ],
        },
        {"Name": "zlib", "Version": "1.2.11", "Vulnerabilities": []},
    ])


def _results():
    return {
        ETCD: ImageScanResult(image_url=ETCD, report=_etcd_report()),
        BROKEN: ImageScanResult(image_url=BROKEN, error="resolving image id failed: tag 'latest' not found"),
    }


class TestRegistry:
    def test_all_formats_available(self):
        assert set(get_all_formatters()) == {"human", "json"}

    def test_registry_keys_match_formatter_names(self):
        for key, formatter in get_all_formatters().items():
            assert formatter.name == key
        assert set(get_all_formatters()) == set(OUTPUT_FORMATS)

    def test_lookup(self):
        assert isinstance(get_formatter("human"), ConsoleFormatter)
        assert isinstance(get_formatter("json"), JsonFormatter)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="unknown output format"):
            get_formatter("xml")


class TestVulnerabilityRows:
    def test_one_row_per_vulnerability(self):
        rows = vulnerability_rows(_etcd_report())
        assert rows == [
            ["CVE-2021-1234", "High", "openssl", "1.1.1n", "1.1.1o", "https://example.com/CVE-2021-1234"],
            ["CVE-2022-0001", "Low", "openssl", "1.1.1n", "N/A", ""],
        ]


class TestConsoleFormatter:
    def test_empty_results(self):
        assert ConsoleFormatter().format_results({}) == "No scan results to display.\n"

    def test_sections_sorted_and_separated(self):
        text = ConsoleFormatter().format_results(_results())
        sections = text.split(f"\n{SECTION_SEPARATOR}\n")

        assert len(sections) == 2
        assert sections[0].startswith(f"Scan Report for: {BROKEN}")
        assert sections[1].startswith(f"Scan Report for: {ETCD}")

    def test_error_section(self):
        text = ConsoleFormatter().format_result(_results()[BROKEN])
        assert "Error: resolving image id failed" in text
        assert "Scan Status" not in text

    def test_vulnerability_table(self):
        text = ConsoleFormatter().format_result(_results()[ETCD])
        assert "Scan Status: scanned" in text
        for column in ("CVE", "Severity", "Package", "Version", "Fixed By", "Link"):
            assert column in text
        assert "CVE-2021-1234" in text
        assert "N/A" in text

    def test_not_scanned(self):
        result = ImageScanResult(image_url=ETCD, report=VulnerabilityReport(status="queued"))
        text = ConsoleFormatter().format_result(result)
        assert "Scan Status: queued" in text
        assert "scan may be queued or failed" in text

    def test_scanned_without_features(self):
        result = ImageScanResult(image_url=ETCD, report=_report())
        assert "No features with vulnerabilities" in ConsoleFormatter().format_result(result)

    def test_scanned_without_vulnerabilities(self):
        report = _report([{"Name": "zlib", "Version": "1.2.11", "Vulnerabilities": []}])
        result = ImageScanResult(image_url=ETCD, report=report)
        assert "No vulnerabilities found for this image." in ConsoleFormatter().format_result(result)

    def test_long_cells_are_truncated(self):
        cell = ConsoleFormatter()._sanitize_cell_for_console("x" * 500)
        assert len(cell) == 200
        assert cell.endswith("...")

    def test_multiline_cells_are_flattened(self):
        assert ConsoleFormatter()._sanitize_cell_for_console("a\r\nb\nc") == "a b c"


class TestJsonFormatter:
    def test_keys_and_fields(self):
        data = json.loads(JsonFormatter().format_results(_results()))

        assert list(data) == [BROKEN, ETCD]
        assert data[BROKEN] == {
            "imageUrl": BROKEN,
            "error": "resolving image id failed: tag 'latest' not found",
        }
        assert data[ETCD]["imageUrl"] == ETCD
        assert "error" not in data[ETCD]
        vuln = data[ETCD]["report"]["data"]["Layer"]["Features"][0]["Vulnerabilities"][0]
        assert vuln["Name"] == "CVE-2021-1234"
        assert vuln["FixedBy"] == "1.1.1o"

    def test_empty_results(self):
        assert json.loads(JsonFormatter().format_results({})) == {}

    def test_fixed_in_versions_kept(self):
        report = _report([{
            "Name": "openssl",
            "Version": "1.1.1n",
            "Vulnerabilities": [{
                "Name": "CVE-2021-1234",
                "FixedIn": [{"Name": "openssl", "Version": "1.1.1o"}],
            }],
        }])
        results = {ETCD: ImageScanResult(image_url=ETCD, report=report)}
        data = json.loads(JsonFormatter().format_results(results))

        vuln = data[ETCD]["report"]["data"]["Layer"]["Features"][0]["Vulnerabilities"][0]
        assert [(f["Name"], f["Version"]) for f in vuln["FixedIn"]] == [("openssl", "1.1.1o")]
