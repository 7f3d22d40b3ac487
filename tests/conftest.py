import pytest

from cloud_compliance_scanner.core.framework import Asset, AssetType, ComplianceRule, Severity
from cloud_compliance_scanner.core.provider import MockInventoryProvider
from cloud_compliance_scanner.core.registry import RuleRegistry


class AlwaysFiresRule(ComplianceRule):
    """Test rule that fires on every asset"""

    def __init__(self, rule_id="TEST_R99", severity=Severity.CRITICAL, penalty=60):
        super().__init__()
        self.rule_id = rule_id
        self.title = "Always fires"
        self.description = "Test rule."
        self.severity = severity
        self.penalty = penalty

    def is_violated(self, state):
        return True


@pytest.fixture
def registry():
    return RuleRegistry()


@pytest.fixture
def default_rules(registry):
    return registry.get_all_rules()


@pytest.fixture
def mock_assets():
    return MockInventoryProvider().fetch_assets()


@pytest.fixture
def public_bucket():
    return Asset(id="gcp-001", type=AssetType.STORAGE_BUCKET, name="mercad-prod-user-photos",
                 is_public=True, tags=frozenset({"production", "user_data"}))


@pytest.fixture
def dev_vm():
    return Asset(id="gcp-002", type=AssetType.VM_INSTANCE, name="mercad-dev-worker-01",
                 is_public=False, tags=frozenset({"development", "no_pii"}))


@pytest.fixture
def private_bucket():
    return Asset(id="gcp-003", type=AssetType.STORAGE_BUCKET, name="mercad-logs-archive",
                 is_public=False, tags=frozenset({"logs", "archived"}))
