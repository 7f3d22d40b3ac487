"""
VM instance compliance rules
"""

from ..core.framework import AssetState, AssetType, ComplianceRule, Severity, has_tag


class ProductionTagRule(ComplianceRule):
    """VM instances must carry the 'production' classification tag"""

    def __init__(self, required_tag: str = "production"):
        super().__init__()
        self.rule_id = "TAG_R02"
        self.title = "VM instances should be tagged for classification"
        self.description = f"Missing essential '{required_tag}' tag for classification."
        self.severity = Severity.HIGH
        self.penalty = 30
        self.asset_types = (AssetType.VM_INSTANCE,)
        self.required_tag = required_tag

    def is_violated(self, state: AssetState) -> bool:
        return not has_tag(state, self.required_tag)
