"""
Python ecosystem dependency scanner
Reads requirements.txt at the scan root and looks up each package in the OSV database
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from lvs.core.scanners.base import EcosystemScanner
from lvs.utils import http_client, paths, schema
from lvs.utils.errors import NetworkError, ParseError

logger = logging.getLogger(__name__)

OSV_ECOSYSTEM = "PyPI"
UNPINNED_VERSION = "latest"

# Split on the first version operator; two-character operators must come first
_VERSION_OPERATOR = re.compile(r"==|>=|<=|~=|>")

# Reference hosts preferred as the advisory link
CODE_HOSTS = ("github",)


@dataclass
class Requirement:
    """A package declared in requirements.txt"""

    name: str
    version: str = UNPINNED_VERSION


def parse_requirement_line(line: str) -> Optional[Requirement]:
    """
    Parse one requirements.txt line.

    Returns None for blank lines, comments and pip options (-r, -e, --index-url).
    """
    line = line.strip()
    if not line or line.startswith("#") or line.startswith("-"):
        return None

    # Remove inline comments and environment markers
    line = line.split(" #")[0].split(";")[0].strip()

    parts = _VERSION_OPERATOR.split(line, maxsplit=1)
    name = parts[0].strip()
    if not name:
        return None

    version = parts[1].strip() if len(parts) > 1 else ""
    return Requirement(name=name, version=version or UNPINNED_VERSION)


def parse_requirements(manifest_path: Path) -> List[Requirement]:
    """
    Parse requirements.txt file, keeping file order.

    Bytes that are not valid UTF-8 are replaced, not rejected.

    Raises:
        ParseError: If the file cannot be read.
    """
    try:
        content = manifest_path.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        raise ParseError(f"cannot read {manifest_path}: {e}") from e

    requirements = []
    for line in content.splitlines():
        requirement = parse_requirement_line(line)
        if requirement is not None:
            requirements.append(requirement)
    return requirements


class PythonScanner(EcosystemScanner):
    """Scanner for Python dependencies"""

    def __init__(
        self,
        manifest_name: str = paths.PYTHON_MANIFEST,
        osv_url: str = schema.OSV_QUERY_URL,
        concurrency: int = 8,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(schema.Ecosystem.PYPI)
        self.manifest_name = manifest_name
        self.osv_url = osv_url
        self.concurrency = concurrency
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = http_client.get_async_client(
                timeout=self.timeout, max_connections=max(self.concurrency, 1)
            )
        return self._client

    async def scan(self, root_path: Path) -> schema.ScanReport:
        """
        Check every package in ``root_path/requirements.txt`` against OSV.

        Only the file at the root is read. A missing file yields an empty
        report. Packages whose lookup fails are logged and skipped.
        """
        root = Path(root_path).resolve()
        manifest = root / self.manifest_name

        if not manifest.is_file():
            logger.debug(f"No {self.manifest_name} in {root}")
            return self.empty_report(root)

        try:
            requirements = parse_requirements(manifest)
        except ParseError as e:
            logger.error(f"Error reading {manifest}: {e}")
            return self.empty_report(root)

        logger.info(f"Querying OSV for {len(requirements)} package(s) in {manifest}")

        semaphore = asyncio.Semaphore(self.concurrency)
        results = await asyncio.gather(
            *(self._check_requirement(semaphore, req, root) for req in requirements)
        )

        vulnerabilities = [record for records in results for record in records]
        return schema.ScanReport(
            root=str(root),
            scanner=self.ecosystem,
            vulnerabilities=vulnerabilities,
            amount=len(vulnerabilities),
        )

    async def scan_all(self, root_path: Path) -> List[schema.ScanReport]:
        return [await self.scan(root_path)]

    async def _check_requirement(
        self, semaphore: asyncio.Semaphore, requirement: Requirement, root: Path
    ) -> List[schema.PypiVulnerability]:
        async with semaphore:
            try:
                data = await self.query_osv(requirement)
                return map_osv_vulns(data, requirement, root)
            except (NetworkError, ParseError) as e:
                logger.error(f"Error querying {requirement.name}@{requirement.version}: {e}")
                return []

    async def query_osv(self, requirement: Requirement) -> Dict[str, Any]:
        """
        POST one package query to OSV.

        Raises:
            NetworkError: On transport failure or a non-success status.
            ParseError: If the body is not a JSON object.
        """
        payload = {
            "package": {"name": requirement.name, "ecosystem": OSV_ECOSYSTEM},
            "version": requirement.version,
        }
        try:
            response = await self.client.post(self.osv_url, json=payload)
        except httpx.HTTPError as e:
            raise NetworkError(f"request failed: {e}") from e

        if not response.is_success:
            raise NetworkError(f"OSV returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"invalid JSON from OSV: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(f"expected a JSON object, got {type(data).__name__}")
        return data


def map_osv_vulns(
    data: Dict[str, Any], requirement: Requirement, root: Path
) -> List[schema.PypiVulnerability]:
    """Map an OSV query response to one record per advisory."""
    vulns = data.get("vulns") or []
    if not isinstance(vulns, list):
        raise ParseError("'vulns' is not a list")

    records = []
    for vuln in vulns:
        if not isinstance(vuln, dict):
            raise ParseError("advisory entry is not an object")
        try:
            records.append(
                schema.PypiVulnerability(
                    root=str(root),
                    name=requirement.name,
                    version=requirement.version,
                    score=_extract_severity(vuln),
                    cve=_extract_cves(vuln),
                    advisory_url=_pick_advisory_url(vuln),
                    details=vuln.get("details") or vuln.get("summary") or "No details available",
                    source=_describe_source(vuln, requirement),
                    fix_available=_has_fix(vuln),
                    advisory_id=vuln.get("id"),
                )
            )
        except (AttributeError, TypeError, ValidationError) as e:
            raise ParseError(f"malformed advisory {vuln.get('id', '')}: {e}") from e

    return records


def _extract_cves(vuln: dict) -> List[str]:
    aliases = vuln.get("aliases") or []
    cves = [a for a in aliases if isinstance(a, str) and a.startswith("CVE-")]
    return cves or ["N/A"]


def _pick_advisory_url(vuln: dict) -> str:
    """Prefer a code-hosting reference, then the first reference."""
    urls = [ref.get("url") for ref in vuln.get("references") or [] if ref.get("url")]
    for url in urls:
        host = urlparse(url).hostname or ""
        if any(code_host in host for code_host in CODE_HOSTS):
            return url
    return urls[0] if urls else "N/A"


def _extract_severity(vuln: dict) -> Optional[str]:
    """Categorical severity from database_specific (e.g. HIGH, MODERATE)"""
    database_specific = vuln.get("database_specific") or {}
    severity = database_specific.get("severity")
    return str(severity) if severity else None


def _has_fix(vuln: dict) -> bool:
    for affected in vuln.get("affected") or []:
        for range_data in affected.get("ranges") or []:
            for event in range_data.get("events") or []:
                if event.get("fixed"):
                    return True
    return False


def _describe_source(vuln: dict, requirement: Requirement) -> str:
    affected = vuln.get("affected") or []
    package = affected[0].get("package") if affected else None
    if package:
        return f"{package.get('ecosystem')} - {package.get('name')}"
    return f"{OSV_ECOSYSTEM} - {requirement.name}"
