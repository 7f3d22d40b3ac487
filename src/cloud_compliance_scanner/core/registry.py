"""
Registry for managing compliance rules
"""

import logging
from typing import Dict, Iterable, List, Optional
from .exceptions import ConfigurationError
from .framework import AssetType, ComplianceRule, Severity

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Ordered registry of compliance rules

    Rules are kept in registration order, which is the order the evaluator
    applies them and therefore the order violations are recorded in.
    """

    def __init__(self, register_defaults: bool = True):
        self.rules: Dict[str, ComplianceRule] = {}
        if register_defaults:
            self._register_default_rules()

    def _register_default_rules(self):
        """Register default compliance rules"""
        from ..rules.storage import PublicStorageRule
        from ..rules.compute import ProductionTagRule

        default_rules = [
            PublicStorageRule(),
            ProductionTagRule(),
        ]

        for rule in default_rules:
            self.register_rule(rule)

    @staticmethod
    def validate_rule(rule: ComplianceRule):
        """Reject rules with missing or malformed metadata"""
        if not isinstance(rule, ComplianceRule):
            raise ValueError(f"Not a compliance rule: {rule!r}")
        if not isinstance(rule.rule_id, str) or not rule.rule_id:
            raise ValueError(f"Rule {rule.__class__.__name__} has no rule_id")
        if not isinstance(rule.severity, Severity):
            raise ValueError(f"Rule {rule.rule_id} has undefined severity {rule.severity!r}")
        penalty = rule.penalty
        if isinstance(penalty, bool) or not isinstance(penalty, int) or penalty < 0:
            raise ValueError(f"Rule {rule.rule_id} has invalid penalty {penalty!r}")

    def register_rule(self, rule: ComplianceRule):
        """Register a compliance rule"""
        self.validate_rule(rule)
        if rule.rule_id in self.rules:
            raise ValueError(f"Rule {rule.rule_id} is already registered")
        self.rules[rule.rule_id] = rule
        logger.debug(f"Registered rule {rule.rule_id} ({rule.severity.value}, -{rule.penalty})")

    def get_rule(self, rule_id: str) -> Optional[ComplianceRule]:
        """Get a specific rule by ID"""
        return self.rules.get(rule_id)

    def get_rules_by_type(self, asset_type: AssetType) -> List[ComplianceRule]:
        """Get all rules that apply to an asset type"""
        return [rule for rule in self.rules.values()
                if not rule.asset_types or asset_type in rule.asset_types]

    def get_all_rules(self) -> List[ComplianceRule]:
        """Get all registered rules"""
        return list(self.rules.values())

    def list_rules(self) -> Dict[str, str]:
        """List all available rules"""
        return {rule_id: rule.title
                for rule_id, rule in self.rules.items()}

    def select(self, rule_ids: Iterable[str] = None,
               excluded: Iterable[str] = None) -> List[ComplianceRule]:
        """Return the rules to run, in registration order"""
        excluded = set(excluded or ())
        if rule_ids:
            wanted = set(rule_ids)
            unknown = wanted - set(self.rules)
            if unknown:
                raise ConfigurationError(f"Unknown rule ids: {', '.join(sorted(unknown))}")
        else:
            wanted = set(self.rules)

        return [rule for rule_id, rule in self.rules.items()
                if rule_id in wanted and rule_id not in excluded]

    def __len__(self):
        return len(self.rules)
