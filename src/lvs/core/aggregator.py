import logging
from typing import Dict, Iterable, Optional, Union

from ..utils import schema

logger = logging.getLogger(__name__)

# CVSS floors for npm scores
CRITICAL_SCORE = 9.0
HIGH_SCORE = 7.0

# OSV database_specific severities, matched exactly
PYPI_SEVERITY_BUCKETS = {
    "HIGH": schema.Severity.CRITICAL,
    "MODERATE": schema.Severity.HIGH,
}


def aggregate(
    *reports: Union[schema.ScanReport, Iterable[schema.ScanReport]],
    target: Optional[str] = None,
) -> schema.AggregateResult:
    """
    Concatenates scan reports into one AggregateResult.

    Reports keep the order they are passed in. Nothing is merged or
    deduplicated: two reports for the same root stay two reports.

    Args:
        *reports: ScanReport objects or iterables of them, e.g. the list
            returned by the npm scanner followed by the PyPI report.
        target: The scanned path, kept for the summary message.

    Returns:
        The aggregate result.
    """
    collected = []
    for item in reports:
        if isinstance(item, schema.ScanReport):
            collected.append(item)
        else:
            collected.extend(item)

    logger.debug(f"Aggregated {len(collected)} report(s)")
    return schema.AggregateResult(target=target, reports=collected)


def has_vulnerabilities(result: schema.AggregateResult) -> bool:
    """True iff any report counts at least one vulnerability."""
    return result.has_vulnerabilities


def classify_severity(vuln: schema.Vulnerability) -> schema.Severity:
    """
    Bucket a record for display.

    npm scores are CVSS numbers; OSV severities are labels. The two scales
    are bucketed separately and never converted into one another.
    """
    if isinstance(vuln, schema.NpmVulnerability):
        score = vuln.score or 0.0
        if score >= CRITICAL_SCORE:
            return schema.Severity.CRITICAL
        if score >= HIGH_SCORE:
            return schema.Severity.HIGH
        return schema.Severity.LOW

    return PYPI_SEVERITY_BUCKETS.get(vuln.score, schema.Severity.LOW)


def summarize(result: schema.AggregateResult) -> Dict[str, Dict[str, int]]:
    """
    Count records per ecosystem and per severity bucket.

    ``amount`` values are not summed across ecosystems because npm counts
    packages while OSV counts advisories.
    """
    by_ecosystem = {ecosystem.value: 0 for ecosystem in schema.Ecosystem}
    by_severity = {severity.value: 0 for severity in schema.Severity}

    for report in result.reports:
        for vuln in report.vulnerabilities:
            by_ecosystem[vuln.ecosystem] += 1
            by_severity[classify_severity(vuln).value] += 1

    return {"ecosystems": by_ecosystem, "severities": by_severity}
