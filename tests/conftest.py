import json
from pathlib import Path

import httpx
import pytest


@pytest.fixture
def npm_audit_output():
    """`npm audit --json` output with three vulnerable packages and two advisories."""
    return {
        "auditReportVersion": 2,
        "vulnerabilities": {
            "lodash": {
                "name": "lodash",
                "severity": "critical",
                "isDirect": True,
                "via": [
                    {
                        "source": 1094499,
                        "name": "lodash",
                        "dependency": "lodash",
                        "title": "Prototype Pollution in lodash",
                        "url": "https://github.com/advisories/GHSA-jf85-cpcp-j695",
                        "severity": "critical",
                        "cwe": ["CWE-1321", "CWE-20"],
                        "cvss": {"score": 9.1, "vectorString": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:N/A:H"},
                        "range": "<4.17.12",
                    }
                ],
                "effects": [],
                "range": "<=4.17.20",
                "nodes": ["node_modules/lodash"],
                "fixAvailable": True,
            },
            "minimist": {
                "name": "minimist",
                "severity": "moderate",
                "isDirect": False,
                "via": [
                    {
                        "source": 1096465,
                        "name": "minimist",
                        "dependency": "minimist",
                        "title": "Prototype Pollution in minimist",
                        "url": "https://github.com/advisories/GHSA-vh95-rmgr-6w4m",
                        "severity": "moderate",
                        "cwe": "CWE-1321",
                        "cvss": {"score": 5.6, "vectorString": None},
                        "range": "<0.2.1",
                    },
                    "mkdirp",
                ],
                "effects": ["mkdirp"],
                "range": "<=0.2.3",
                "nodes": ["node_modules/mkdirp/node_modules/minimist", "node_modules/minimist"],
                "fixAvailable": {"name": "mkdirp", "version": "1.0.4", "isSemVerMajor": True},
            },
            "mkdirp": {
                "name": "mkdirp",
                "severity": "moderate",
                "isDirect": True,
                "via": ["minimist"],
                "effects": [],
                "range": "0.4.1 - 0.5.1",
                "nodes": ["node_modules/mkdirp"],
                "fixAvailable": False,
            },
        },
        "metadata": {"vulnerabilities": {"total": 3}},
    }


@pytest.fixture
def osv_vuln():
    """A single OSV advisory as returned by /v1/query."""
    return {
        "id": "GHSA-j8r2-6x86-q33q",
        "summary": "Unintended leak of Proxy-Authorization header in requests",
        "details": "Requests forwards proxy credentials to the destination server.",
        "aliases": ["CVE-2023-32681", "PYSEC-2023-74"],
        "references": [
            {"type": "WEB", "url": "https://nvd.nist.gov/vuln/detail/CVE-2023-32681"},
            {"type": "PACKAGE", "url": "https://github.com/psf/requests/security/advisories/GHSA-j8r2-6x86-q33q"},
        ],
        "affected": [
            {
                "package": {"ecosystem": "PyPI", "name": "requests"},
                "ranges": [
                    {"type": "ECOSYSTEM", "events": [{"introduced": "2.3.0"}, {"fixed": "2.31.0"}]}
                ],
            }
        ],
        "database_specific": {"severity": "MODERATE"},
    }


class OSVStub:
    """httpx transport handler that answers OSV queries per package name."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.queries = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.queries.append(body)
        answer = self.responses.get(body["package"]["name"], {})
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)


@pytest.fixture
def osv_stub():
    return OSVStub()


@pytest.fixture
def osv_client(osv_stub):
    return httpx.AsyncClient(transport=httpx.MockTransport(osv_stub))


@pytest.fixture
def npm_project(tmp_path) -> Path:
    project = tmp_path / "web"
    project.mkdir()
    (project / "package-lock.json").write_text("{}")
    return project
