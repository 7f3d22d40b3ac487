import pytest

from cloud_compliance_scanner.core.exceptions import ConfigurationError
from cloud_compliance_scanner.core.framework import Asset, AssetType, ComplianceRule, Severity
from cloud_compliance_scanner.core.registry import RuleRegistry
from cloud_compliance_scanner.rules import ProductionTagRule, PublicStorageRule

from conftest import AlwaysFiresRule


class TestPublicStorageRule:

    def test_fires_on_public_bucket(self, public_bucket):
        result = PublicStorageRule().evaluate(public_bucket.snapshot())
        assert result is not None
        assert result.penalty == 50
        assert result.violation.rule_id == "SEC_R01"
        assert result.violation.severity is Severity.CRITICAL
        assert result.violation.description == "Publicly exposed storage bucket."

    def test_ignores_private_bucket(self, private_bucket):
        assert PublicStorageRule().evaluate(private_bucket.snapshot()) is None

    def test_ignores_public_vm(self):
        vm = Asset(id="vm-1", type=AssetType.VM_INSTANCE, is_public=True, tags={"production"})
        assert PublicStorageRule().evaluate(vm.snapshot()) is None


class TestProductionTagRule:

    def test_fires_on_untagged_vm(self, dev_vm):
        result = ProductionTagRule().evaluate(dev_vm.snapshot())
        assert result is not None
        assert result.penalty == 30
        assert result.violation.rule_id == "TAG_R02"
        assert result.violation.severity is Severity.HIGH
        assert result.violation.description == (
            "Missing essential 'production' tag for classification."
        )

    def test_ignores_production_vm(self):
        vm = Asset(id="vm-1", type=AssetType.VM_INSTANCE, tags={"production"})
        assert ProductionTagRule().evaluate(vm.snapshot()) is None

    def test_ignores_buckets(self, private_bucket):
        assert ProductionTagRule().evaluate(private_bucket.snapshot()) is None

    def test_is_pure(self, dev_vm):
        rule = ProductionTagRule()
        state = dev_vm.snapshot()
        assert rule.evaluate(state) == rule.evaluate(state)


class TestRuleRegistry:

    def test_default_rules_in_order(self, registry):
        assert [rule.rule_id for rule in registry.get_all_rules()] == ["SEC_R01", "TAG_R02"]
        assert len(registry) == 2

    def test_list_and_get(self, registry):
        assert set(registry.list_rules()) == {"SEC_R01", "TAG_R02"}
        assert isinstance(registry.get_rule("SEC_R01"), PublicStorageRule)
        assert registry.get_rule("NOPE") is None

    def test_rules_by_type(self, registry):
        ids = [rule.rule_id for rule in registry.get_rules_by_type(AssetType.VM_INSTANCE)]
        assert ids == ["TAG_R02"]

    def test_register_custom_rule_appends(self, registry):
        registry.register_rule(AlwaysFiresRule())
        assert registry.get_all_rules()[-1].rule_id == "TEST_R99"
        # untyped rules apply everywhere
        assert registry.get_rules_by_type(AssetType.STORAGE_BUCKET)[-1].rule_id == "TEST_R99"

    def test_duplicate_rule_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.register_rule(PublicStorageRule())

    def test_undefined_severity_rejected(self, registry):
        rule = AlwaysFiresRule(severity="SEVERE")
        with pytest.raises(ValueError, match="severity"):
            registry.register_rule(rule)

    @pytest.mark.parametrize("penalty", [-1, 2.5, True])
    def test_bad_penalty_rejected(self, registry, penalty):
        with pytest.raises(ValueError, match="penalty"):
            registry.register_rule(AlwaysFiresRule(penalty=penalty))

    def test_missing_rule_id_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.register_rule(AlwaysFiresRule(rule_id=""))

    def test_default_penalty_follows_severity(self):
        class LowRule(ComplianceRule):
            def __init__(self):
                super().__init__()
                self.rule_id = "LOW_R01"
                self.severity = Severity.LOW

            def is_violated(self, state):
                return True

        assert LowRule().penalty == 5

    def test_select(self, registry):
        assert [r.rule_id for r in registry.select()] == ["SEC_R01", "TAG_R02"]
        assert [r.rule_id for r in registry.select(["TAG_R02", "SEC_R01"])] == ["SEC_R01", "TAG_R02"]
        assert [r.rule_id for r in registry.select(excluded=["SEC_R01"])] == ["TAG_R02"]

    def test_select_unknown_rule(self, registry):
        with pytest.raises(ConfigurationError, match="Unknown rule ids: MISSING"):
            registry.select(["SEC_R01", "MISSING"])

    def test_empty_registry(self):
        assert RuleRegistry(register_defaults=False).get_all_rules() == []
