import pytest

from lvs.core import aggregator
from lvs.utils import schema


@pytest.fixture
def sample_reports():
    """Provides two npm reports and one PyPI report for testing."""
    web = schema.ScanReport(
        root="/app/web",
        scanner=schema.Ecosystem.NPM,
        amount=2,
        vulnerabilities=[
            schema.NpmVulnerability(root="/app/web", name="lodash", version="<4.17.12", score=9.1),
            schema.NpmVulnerability(root="/app/web", name="minimist", version="<0.2.1", score=7.5),
        ],
    )
    api = schema.ScanReport(
        root="/app/api",
        scanner=schema.Ecosystem.NPM,
        amount=1,
        vulnerabilities=[
            schema.NpmVulnerability(root="/app/api", name="lodash", version="<4.17.12", score=9.1),
        ],
    )
    python = schema.ScanReport(
        root="/app",
        scanner=schema.Ecosystem.PYPI,
        amount=3,
        vulnerabilities=[
            schema.PypiVulnerability(root="/app", name="requests", score="HIGH", source="PyPI - requests"),
            schema.PypiVulnerability(root="/app", name="urllib3", score="MODERATE", source="PyPI - urllib3"),
            schema.PypiVulnerability(root="/app", name="jinja2", score="LOW", source="PyPI - jinja2"),
        ],
    )
    return [web, api, python]


def test_aggregate_keeps_order(sample_reports):
    web, api, python = sample_reports

    result = aggregator.aggregate([web, api], python, target="/app")

    assert result.target == "/app"
    assert [r.root for r in result.reports] == ["/app/web", "/app/api", "/app"]


def test_aggregate_does_not_deduplicate(sample_reports):
    """
    The same advisory under two roots, or the same report twice, stays as given.
    """
    web = sample_reports[0]

    result = aggregator.aggregate(web, web)

    assert len(result.reports) == 2
    assert result.total_records == 4


def test_aggregate_nothing():
    result = aggregator.aggregate()

    assert result.reports == []
    assert not aggregator.has_vulnerabilities(result)


def test_has_vulnerabilities_uses_amount():
    empty_npm = schema.ScanReport(root="/a", scanner=schema.Ecosystem.NPM)
    # npm counts a package even when all its causes are transitive
    transitive_only = schema.ScanReport(root="/b", scanner=schema.Ecosystem.NPM, amount=1)

    assert not aggregator.has_vulnerabilities(aggregator.aggregate(empty_npm))
    assert aggregator.has_vulnerabilities(aggregator.aggregate(empty_npm, transitive_only))


@pytest.mark.parametrize(
    "score,expected",
    [
        (10.0, schema.Severity.CRITICAL),
        (9.0, schema.Severity.CRITICAL),
        (8.9, schema.Severity.HIGH),
        (7.0, schema.Severity.HIGH),
        (6.9, schema.Severity.LOW),
        (None, schema.Severity.LOW),
    ],
)
def test_classify_npm_scores(score, expected):
    vuln = schema.NpmVulnerability(root="/app", name="pkg", score=score)

    assert aggregator.classify_severity(vuln) == expected


@pytest.mark.parametrize(
    "score,expected",
    [
        ("HIGH", schema.Severity.CRITICAL),
        ("MODERATE", schema.Severity.HIGH),
        ("LOW", schema.Severity.LOW),
        ("CRITICAL", schema.Severity.LOW),
        ("moderate", schema.Severity.LOW),
        (None, schema.Severity.LOW),
    ],
)
def test_classify_pypi_labels(score, expected):
    vuln = schema.PypiVulnerability(root="/app", name="pkg", score=score, source="PyPI - pkg")

    assert aggregator.classify_severity(vuln) == expected


def test_summarize(sample_reports):
    summary = aggregator.summarize(aggregator.aggregate(sample_reports))

    assert summary["ecosystems"] == {"npm": 3, "pypi": 3}
    assert summary["severities"] == {"low": 1, "high": 2, "critical": 3}


def test_report_rejects_foreign_records():
    with pytest.raises(ValueError):
        schema.ScanReport(
            root="/app",
            scanner=schema.Ecosystem.PYPI,
            vulnerabilities=[schema.NpmVulnerability(root="/app", name="lodash")],
        )
