"""
npm ecosystem dependency scanner
Finds package-lock.json files and audits each project with `npm audit --json`
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from lvs.core.scanners.base import EcosystemScanner
from lvs.utils import paths, schema
from lvs.utils.errors import ParseError, ToolInvocationError
from lvs.utils.process import run_command

logger = logging.getLogger(__name__)

AUDIT_COMMAND = ["npm", "audit", "--json"]


class NpmScanner(EcosystemScanner):
    """Scanner for npm projects"""

    def __init__(
        self,
        manifest_name: str = paths.NPM_MANIFEST,
        exclude_dir: str = paths.DEPENDENCY_CACHE_DIR,
        max_output: int = schema.MIN_OUTPUT_BYTES,
        timeout: Optional[float] = None,
    ):
        super().__init__(schema.Ecosystem.NPM)
        self.manifest_name = manifest_name
        self.exclude_dir = exclude_dir
        self.max_output = max_output
        self.timeout = timeout

    async def scan(self, root_path: Path) -> List[schema.ScanReport]:
        """
        Audit every npm project below ``root_path``.

        Projects are audited one after another. A project whose audit fails
        is logged and left out of the result.
        """
        lock_files = paths.find_manifests(root_path, self.manifest_name, self.exclude_dir)
        if not lock_files:
            logger.debug(f"No {self.manifest_name} found under {root_path}")

        reports = []
        for lock_path in lock_files:
            project_dir = lock_path.parent
            logger.info(f"Auditing: {project_dir}")

            try:
                audit_json = await self._run_audit(project_dir)
                reports.append(parse_audit(audit_json, project_dir))
            except ParseError as e:
                logger.error(f"Error parsing audit output from {project_dir}: {e}")
            except ToolInvocationError as e:
                logger.error(f"Error auditing {project_dir}: {e}")

        return reports

    async def scan_all(self, root_path: Path) -> List[schema.ScanReport]:
        return await self.scan(root_path)

    async def _run_audit(self, project_dir: Path) -> Dict[str, Any]:
        """Run npm audit and decode its JSON, whatever the exit status."""
        result = await run_command(
            AUDIT_COMMAND,
            cwd=project_dir,
            max_output=self.max_output,
            timeout=self.timeout,
        )

        # npm audit exits nonzero when it finds vulnerabilities
        if not result.stdout.strip():
            if result.returncode != 0:
                detail = result.stderr.strip() or f"exit status {result.returncode}"
                raise ToolInvocationError(f"npm audit produced no output ({detail})")
            raise ParseError("npm audit produced no output")

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(f"expected a JSON object, got {type(data).__name__}")

        return data


def parse_audit(audit_json: Dict[str, Any], root_dir: Path) -> schema.ScanReport:
    """
    Map an `npm audit --json` document to a ScanReport.

    ``amount`` counts the vulnerable packages npm lists. Each package
    contributes one record per advisory object in its ``via`` list; string
    entries name other vulnerable packages and are dropped.
    """
    root = str(root_dir)

    error = audit_json.get("error")
    if error:
        summary = error.get("summary") if isinstance(error, dict) else error
        logger.warning(f"npm audit reported an error for {root}: {summary}")

    vulns = audit_json.get("vulnerabilities") or {}
    if not isinstance(vulns, dict):
        raise ParseError("'vulnerabilities' is not an object")

    records = []
    for pkg_name, data in vulns.items():
        if not isinstance(data, dict):
            continue
        via = data.get("via")
        if not isinstance(via, list):
            via = [via]

        for cause in via:
            if not isinstance(cause, dict):
                continue
            try:
                records.append(_record_from_cause(root, pkg_name, data, cause))
            except ValidationError as e:
                raise ParseError(f"unexpected advisory for {pkg_name}: {e}") from e

    return schema.ScanReport(
        root=root,
        scanner=schema.Ecosystem.NPM,
        vulnerabilities=records,
        amount=len(vulns),
    )


def _record_from_cause(
    root: str, pkg_name: str, data: Dict[str, Any], cause: Dict[str, Any]
) -> schema.NpmVulnerability:
    nodes = data.get("nodes") or []
    cvss = cause.get("cvss")
    score = cvss.get("score") if isinstance(cvss, dict) else None

    return schema.NpmVulnerability(
        root=root,
        name=pkg_name,
        version=cause.get("range") or data.get("range"),
        score=score,
        cwe=cause.get("cwe"),
        advisory_url=cause.get("url"),
        fix_available=bool(data.get("fixAvailable")),
        source=nodes[0] if nodes else None,
        title=cause.get("title"),
        advisory_severity=cause.get("severity"),
    )
