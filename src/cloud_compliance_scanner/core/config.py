"""
Scan configuration
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import ConfigurationError
from .output import DEFAULT_REPORT_FILE

SOURCES = ("mock", "json", "aws")
ENV_PREFIX = "COMPLIANCE_SCANNER"


@dataclass
class ScanConfig:
    """Settings for one scan run"""
    source: str = "mock"
    inventory_file: Optional[str] = None
    region: str = "us-east-1"
    profile: Optional[str] = None
    rule_ids: List[str] = field(default_factory=list)
    excluded_rules: List[str] = field(default_factory=list)
    output_file: str = DEFAULT_REPORT_FILE
    parallel: bool = False
    max_workers: int = 5
    strict: bool = True

    def __post_init__(self):
        if self.source not in SOURCES:
            raise ConfigurationError(
                f"Unknown inventory source {self.source!r}, expected one of {', '.join(SOURCES)}"
            )
        if self.source == "json" and not self.inventory_file:
            raise ConfigurationError("The json inventory source requires an inventory file")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        if not self.output_file:
            raise ConfigurationError("output_file must not be empty")
        overlap = set(self.rule_ids) & set(self.excluded_rules)
        if overlap:
            raise ConfigurationError(
                f"Rules both selected and excluded: {', '.join(sorted(overlap))}"
            )
