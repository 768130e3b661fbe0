from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Annotated, List, Literal, Optional, Union
from enum import Enum
from pathlib import Path


MIN_OUTPUT_BYTES = 10 * 1024 * 1024
OSV_QUERY_URL = "https://api.osv.dev/v1/query"


class Ecosystem(str, Enum):
    NPM = "npm"
    PYPI = "pypi"


class Severity(str, Enum):
    LOW = "low"
    HIGH = "high"
    CRITICAL = "critical"


class OutputFormat(str, Enum):
    PRETTY = "pretty"
    JSON = "json"


class NpmVulnerability(BaseModel):
    """One `npm audit` advisory attached to an installed package."""
    ecosystem: Literal["npm"] = "npm"
    root: str
    name: str
    version: Optional[str] = None
    score: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    cwe: List[str] = Field(default_factory=list)
    advisory_url: Optional[str] = None
    fix_available: bool = False
    source: Optional[str] = None
    title: Optional[str] = None
    advisory_severity: Optional[str] = None

    @field_validator('cwe', mode='before')
    @classmethod
    def validate_cwe(cls, v):
        """npm reports either a single CWE string or a list of them."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class PypiVulnerability(BaseModel):
    """One OSV advisory attached to a declared requirement."""
    ecosystem: Literal["pypi"] = "pypi"
    root: str
    name: str
    version: str = "latest"
    score: Optional[str] = None
    cve: List[str] = Field(default_factory=lambda: ["N/A"])
    advisory_url: str = "N/A"
    details: str = "No details available"
    fix_available: bool = False
    source: str
    advisory_id: Optional[str] = None

    @field_validator('cve')
    @classmethod
    def validate_cve(cls, v):
        return v or ["N/A"]


Vulnerability = Annotated[
    Union[NpmVulnerability, PypiVulnerability],
    Field(discriminator="ecosystem"),
]


class ScanReport(BaseModel):
    root: str
    scanner: Ecosystem
    vulnerabilities: List[Vulnerability] = Field(default_factory=list)
    amount: int = Field(default=0, ge=0)

    @model_validator(mode='after')
    def check_record_ecosystem(self):
        for vuln in self.vulnerabilities:
            if vuln.ecosystem != self.scanner.value:
                raise ValueError(
                    f"{vuln.ecosystem} record in a {self.scanner.value} report"
                )
        return self


class AggregateResult(BaseModel):
    target: Optional[str] = None
    reports: List[ScanReport] = Field(default_factory=list)

    @property
    def has_vulnerabilities(self) -> bool:
        return any(report.amount > 0 for report in self.reports)

    @property
    def total_records(self) -> int:
        return sum(len(report.vulnerabilities) for report in self.reports)


class ScanConfig(BaseModel):
    root_path: Path
    output_format: OutputFormat = OutputFormat.PRETTY
    output_file: Optional[Path] = None
    ecosystems: List[Ecosystem] = Field(
        default_factory=lambda: [Ecosystem.NPM, Ecosystem.PYPI]
    )
    concurrency: int = 8
    request_timeout: float = 30.0
    audit_timeout: Optional[float] = 300.0
    max_output_bytes: int = MIN_OUTPUT_BYTES
    osv_url: str = OSV_QUERY_URL
    npm_manifest: str = "package-lock.json"
    python_manifest: str = "requirements.txt"
    exclude_dir: str = "node_modules"

    @field_validator('root_path')
    @classmethod
    def validate_root_path(cls, v):
        """Resolve the scan target; it must be an existing directory."""
        if not isinstance(v, Path):
            v = Path(v)

        try:
            v = v.resolve()
        except (OSError, RuntimeError) as e:
            raise ValueError(f'Invalid root path: {e}')

        if not v.exists():
            raise ValueError(f'Target path does not exist: {v}')

        if not v.is_dir():
            raise ValueError(f'Target path must be a directory: {v}')

        return v

    @field_validator('output_file')
    @classmethod
    def validate_output_file(cls, v):
        if v is None:
            return v
        return Path(v).resolve()

    @field_validator('ecosystems')
    @classmethod
    def validate_ecosystems(cls, v):
        if not v:
            raise ValueError('At least one ecosystem must be enabled')
        # keep first occurrence, preserve order
        return list(dict.fromkeys(v))

    @field_validator('concurrency')
    @classmethod
    def validate_concurrency(cls, v):
        if v < 1:
            raise ValueError('Concurrency must be at least 1')
        if v > 64:
            raise ValueError('Concurrency is too high (max 64)')
        return v

    @field_validator('request_timeout')
    @classmethod
    def validate_request_timeout(cls, v):
        if v <= 0:
            raise ValueError('Request timeout must be positive')
        return v

    @field_validator('audit_timeout')
    @classmethod
    def validate_audit_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError('Audit timeout must be positive')
        return v

    @field_validator('max_output_bytes')
    @classmethod
    def validate_max_output_bytes(cls, v):
        if v < MIN_OUTPUT_BYTES:
            raise ValueError(
                f'Output ceiling must be at least {MIN_OUTPUT_BYTES} bytes'
            )
        return v

    @field_validator('npm_manifest', 'python_manifest', 'exclude_dir')
    @classmethod
    def validate_file_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('File and directory names cannot be empty')
        if '/' in v or '\\' in v:
            raise ValueError(f'Expected a bare name, got a path: {v}')
        return v
