"""
Common interface for ecosystem-specific dependency scanners.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from lvs.utils import schema


class EcosystemScanner(ABC):
    """Base class for ecosystem-specific dependency scanners"""

    def __init__(self, ecosystem: schema.Ecosystem):
        self.ecosystem = ecosystem

    @abstractmethod
    async def scan_all(self, root_path: Path) -> List[schema.ScanReport]:
        """
        Scan a project tree for vulnerable dependencies.

        Used by the orchestrator so every ecosystem yields a list of reports,
        whatever shape its own ``scan`` method returns.

        Failures that only affect one project root or one package are
        logged and skipped; they never abort the whole scan.

        Args:
            root_path: Root directory to scan

        Returns:
            One ScanReport per project root the scanner covered
        """
        pass

    def empty_report(self, root_path: Path) -> schema.ScanReport:
        """Report for a root where nothing was found."""
        return schema.ScanReport(root=str(root_path), scanner=self.ecosystem)
