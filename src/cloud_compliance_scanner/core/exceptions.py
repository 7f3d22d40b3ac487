"""
Exception hierarchy for the compliance scanner
"""


class ComplianceScannerError(Exception):
    """Base class for all scanner errors"""


class InvalidAssetError(ComplianceScannerError):
    """Asset record is missing or has malformed identity fields"""

    def __init__(self, message: str, asset_id: str = None):
        super().__init__(message)
        self.asset_id = asset_id


class InventoryError(ComplianceScannerError):
    """Inventory source could not supply assets"""


class ConfigurationError(ComplianceScannerError):
    """Invalid scan configuration"""


class ReportError(ComplianceScannerError):
    """Report sink failure"""


class ReportSerializationError(ReportError):
    """Report could not be encoded"""


class ReportPersistenceError(ReportError):
    """Report could not be written to storage"""
