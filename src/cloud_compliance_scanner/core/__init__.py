"""Core framework components for the compliance scanner"""

from .framework import Asset, AssetState, AssetType, ComplianceRule, RuleResult, Severity, Violation
from .registry import RuleRegistry
from .engine import ComplianceEvaluator, ScanResult
from .report import filter_non_compliant
from .output import OutputEngine, ReportOutcome, ReportStatus
from .provider import InventoryProvider, MockInventoryProvider, JSONInventoryProvider, AWSInventoryProvider
from .config import ScanConfig

__all__ = [
    "Asset",
    "AssetState",
    "AssetType",
    "ComplianceRule",
    "RuleResult",
    "Severity",
    "Violation",
    "RuleRegistry",
    "ComplianceEvaluator",
    "ScanResult",
    "filter_non_compliant",
    "OutputEngine",
    "ReportOutcome",
    "ReportStatus",
    "InventoryProvider",
    "MockInventoryProvider",
    "JSONInventoryProvider",
    "AWSInventoryProvider",
    "ScanConfig",
]
