"""
Runs the enabled ecosystem scanners over one target and aggregates their reports.
"""

import logging
from typing import List, Optional

import httpx

from lvs.core import aggregator
from lvs.core.scanners import EcosystemScanner, NpmScanner, PythonScanner
from lvs.utils import schema

logger = logging.getLogger(__name__)


def build_scanners(
    config: schema.ScanConfig, client: Optional[httpx.AsyncClient] = None
) -> List[EcosystemScanner]:
    """Create scanners for the enabled ecosystems, npm first."""
    scanners: List[EcosystemScanner] = []

    if schema.Ecosystem.NPM in config.ecosystems:
        scanners.append(
            NpmScanner(
                manifest_name=config.npm_manifest,
                exclude_dir=config.exclude_dir,
                max_output=config.max_output_bytes,
                timeout=config.audit_timeout,
            )
        )

    if schema.Ecosystem.PYPI in config.ecosystems:
        scanners.append(
            PythonScanner(
                manifest_name=config.python_manifest,
                osv_url=config.osv_url,
                concurrency=config.concurrency,
                timeout=config.request_timeout,
                client=client,
            )
        )

    return scanners


async def run_scan(
    config: schema.ScanConfig, client: Optional[httpx.AsyncClient] = None
) -> schema.AggregateResult:
    """
    Scan ``config.root_path`` with every enabled ecosystem.

    Per-root and per-package failures are handled inside the scanners.
    Anything that escapes them is unexpected and propagates.

    Args:
        config: Validated scan configuration.
        client: HTTP client for OSV; the shared client is used when omitted.

    Returns:
        Reports in scanner-then-root order.
    """
    root = config.root_path
    logger.info(f"Scanning dependencies in {root}")

    reports = []
    for scanner in build_scanners(config, client):
        scanner_reports = await scanner.scan_all(root)
        logger.debug(f"{scanner.ecosystem.value}: {len(scanner_reports)} report(s)")
        reports.append(scanner_reports)

    return aggregator.aggregate(*reports, target=str(root))
