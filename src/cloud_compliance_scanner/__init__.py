"""
Cloud Compliance Scanner - A rule engine for cloud asset inventories

This package evaluates cloud resources against a registry of compliance
rules, scores each asset and reports the ones that fall short.
"""

__version__ = "1.0.0"
__author__ = "Security Team"
__email__ = "security@example.com"

from .core.framework import Asset, ComplianceRule, Violation, Severity, AssetType
from .core.engine import ComplianceEvaluator, ScanResult
from .core.registry import RuleRegistry
from .core.report import filter_non_compliant
from .core.output import OutputEngine

__all__ = [
    "Asset",
    "ComplianceRule",
    "Violation",
    "Severity",
    "AssetType",
    "ComplianceEvaluator",
    "ScanResult",
    "RuleRegistry",
    "filter_non_compliant",
    "OutputEngine",
]
