"""
Storage bucket compliance rules
"""

from ..core.framework import AssetState, AssetType, ComplianceRule, Severity


class PublicStorageRule(ComplianceRule):
    """Storage buckets must not be publicly exposed"""

    def __init__(self):
        super().__init__()
        self.rule_id = "SEC_R01"
        self.title = "Storage buckets should not be publicly accessible"
        self.description = "Publicly exposed storage bucket."
        self.severity = Severity.CRITICAL
        self.penalty = 50
        self.asset_types = (AssetType.STORAGE_BUCKET,)

    def is_violated(self, state: AssetState) -> bool:
        return state.is_public
