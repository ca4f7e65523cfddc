"""End-to-end tests for the quay-scanner command line entry point.

``requests.get`` is patched so that no network access happens.
"""

import json

import pytest
import requests

from quay_scanner import main


API = "https://quay.io/api/v1/"
ETCD = "quay.io/coreos/etcd:v3.5.0"


class FakeResponse:
    def __init__(self, status_code, payload, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self.content = json.dumps(payload).encode()

    def json(self):
        return json.loads(self.content.decode())


SECURITY_PAYLOAD = {
    "status": "scanned",
    "data": {"Layer": {"Features": [{
        "Name": "busybox",
        "Version": "1.35.0",
        "Vulnerabilities": [{
            "Name": "CVE-2021-1234",
            "Severity": "High",
            "Link": "https://example.com/CVE-2021-1234",
        }],
    }]}},
}

ROUTES = {
    API + "repository/coreos/etcd/tag/v3.5.0": FakeResponse(200, {"manifest_digest": "sha256:abc123"}),
    API + "repository/coreos/etcd/image/abc123/security": FakeResponse(200, SECURITY_PAYLOAD),
}


@pytest.fixture(autouse=True)
def fake_quay(monkeypatch):
    """Serve the routes above; anything else is a 404."""
    calls = []

    def fake_get(url, headers=None, params=None, timeout=None):
        calls.append({"url": url, "headers": headers})
        return ROUTES.get(url) or FakeResponse(404, {"error": "not found"}, reason="Not Found")

    for name in ("QUAY_TOKEN", "QUAY_API_BASE_URL", "QUAY_TIMEOUT_SECONDS", "QUAY_USER_AGENT", "QUAY_SCANNER_WORKERS"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"INPUT_{name}", raising=False)
    monkeypatch.setattr(requests, "get", fake_get)
    return calls


def _run(tmp_path, *argv):
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(tmp_path / "absent.yaml"), *argv])
    return exc_info.value.code


def test_single_image_human_output(tmp_path, capsys):
    assert _run(tmp_path, "--image", ETCD) == 0

    out = capsys.readouterr().out
    assert f"Scan Report for: {ETCD}" in out
    assert "CVE-2021-1234" in out
    assert "N/A" in out


def test_json_output_from_file(tmp_path, capsys):
    images = tmp_path / "images.json"
    images.write_text(json.dumps({"images": [ETCD, "quay.io/coreos/etcd:missing", "docker.io/nginx:1"]}))

    assert _run(tmp_path, "--file", str(images), "--format", "json", "--workers", "2") == 0

    data = json.loads(capsys.readouterr().out)
    assert set(data) == {ETCD, "quay.io/coreos/etcd:missing", "docker.io/nginx:1"}
    assert data[ETCD]["report"]["status"] == "scanned"
    assert "not found" in data["quay.io/coreos/etcd:missing"]["error"]
    assert data["docker.io/nginx:1"]["error"].startswith("parsing failed")


def test_report_written_to_output_file(tmp_path, capsys):
    out_path = tmp_path / "reports" / "scan.json"
    assert _run(tmp_path, "--image", ETCD, "--format", "json", "--output", str(out_path)) == 0

    assert capsys.readouterr().out == ""
    assert ETCD in json.loads(out_path.read_text())


def test_token_sent_as_bearer(tmp_path, fake_quay, monkeypatch):
    monkeypatch.setenv("QUAY_TOKEN", "from-env")
    assert _run(tmp_path, "--image", ETCD) == 0
    assert all(c["headers"]["Authorization"] == "Bearer from-env" for c in fake_quay)


def test_non_positive_workers_exit_1(tmp_path, capsys):
    assert _run(tmp_path, "--image", ETCD, "--workers", "0") == 1
    assert "--workers must be a positive number" in capsys.readouterr().err


def test_missing_source_is_usage_error(tmp_path):
    assert _run(tmp_path) == 2


def test_empty_image_list_exit_1(tmp_path, fake_quay, capsys):
    images = tmp_path / "images.yaml"
    images.write_text("images: []\n")

    assert _run(tmp_path, "--file", str(images)) == 1
    assert "No image references" in capsys.readouterr().err
    assert fake_quay == []


def test_unreadable_input_file_exit_1(tmp_path, capsys):
    assert _run(tmp_path, "--file", str(tmp_path / "absent.json")) == 1
    assert "Error loading image references" in capsys.readouterr().err


def test_invalid_config_file_exit_1(tmp_path, capsys):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("quay:\n  timeout_seconds: soon\n")
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(cfg), "--image", ETCD])
    assert exc_info.value.code == 1
    assert "Configuration error" in capsys.readouterr().err


def test_invalid_base_url_exit_1(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("QUAY_API_BASE_URL", "ftp://quay.example/")
    assert _run(tmp_path, "--image", ETCD) == 1
    assert "Error creating Quay client" in capsys.readouterr().err


def test_per_image_failures_still_exit_0(tmp_path, capsys):
    assert _run(tmp_path, "--image", "quay.io/coreos/etcd:missing") == 0
    assert "Error: resolving image id failed" in capsys.readouterr().out
