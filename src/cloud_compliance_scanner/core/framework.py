"""
Core framework classes: assets, violations and the compliance rule interface
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .exceptions import InvalidAssetError


class AssetType(str, Enum):
    """Category of a cloud resource"""
    STORAGE_BUCKET = "STORAGE_BUCKET"
    VM_INSTANCE = "VM_INSTANCE"


class Severity(str, Enum):
    """Violation severity levels"""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# Conventional score penalty per severity
DEFAULT_PENALTIES: Dict[Severity, int] = {
    Severity.CRITICAL: 50,
    Severity.HIGH: 30,
    Severity.MEDIUM: 15,
    Severity.LOW: 5,
}

MAX_SCORE = 100


@dataclass(frozen=True)
class Violation:
    """A single failed rule on a single asset"""
    rule_id: str
    description: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        """Convert violation to dictionary for JSON output"""
        return {
            "RuleID": self.rule_id,
            "Description": self.description,
            "Severity": self.severity.value,
        }


@dataclass(frozen=True)
class AssetState:
    """Read-only view of an asset handed to rules"""
    id: str
    type: AssetType
    name: str
    is_public: bool
    tags: FrozenSet[str]


def _coerce_type(value: Any, asset_id: str = None) -> AssetType:
    if isinstance(value, AssetType):
        return value
    try:
        return AssetType(str(value).strip().upper().replace("-", "_"))
    except ValueError:
        raise InvalidAssetError(f"Unknown asset type: {value!r}", asset_id=asset_id) from None


def _coerce_tags(value: Any, asset_id: str = None) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidAssetError(f"Tags must be a list of strings, got {value!r}", asset_id=asset_id)
    for tag in value:
        if not isinstance(tag, str):
            raise InvalidAssetError(f"Tag {tag!r} is not a string", asset_id=asset_id)
    return frozenset(value)


@dataclass
class Asset:
    """A cloud resource subject to compliance evaluation"""
    id: str
    type: AssetType
    name: str = ""
    is_public: bool = False
    tags: FrozenSet[str] = field(default_factory=frozenset)
    compliance_score: Optional[int] = None
    violations: List[Violation] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidAssetError(f"Asset id must be a non-empty string, got {self.id!r}")
        if self.type is None:
            raise InvalidAssetError("Asset type is required", asset_id=self.id)
        self.type = _coerce_type(self.type, self.id)
        self.name = self.name or ""
        if not isinstance(self.is_public, bool):
            raise InvalidAssetError(f"IsPublic must be a boolean, got {self.is_public!r}",
                                    asset_id=self.id)
        self.tags = _coerce_tags(self.tags, self.id)

    def __setattr__(self, key, value):
        if key == "id" and "id" in self.__dict__:
            raise AttributeError("Asset id is immutable")
        super().__setattr__(key, value)

    @property
    def is_evaluated(self) -> bool:
        return self.compliance_score is not None

    @property
    def is_compliant(self) -> bool:
        return self.compliance_score == MAX_SCORE

    def snapshot(self) -> AssetState:
        """Return the immutable identity/classification fields rules inspect"""
        return AssetState(
            id=self.id,
            type=self.type,
            name=self.name,
            is_public=self.is_public,
            tags=self.tags,
        )

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "Asset":
        """Build an asset from an inventory record.

        Accepts both the report field names (``ID``, ``Type``, ``Name``,
        ``IsPublic``, ``Tags``) and their snake_case equivalents. Any score or
        violations in the record are ignored; evaluation overwrites them.
        """
        if not isinstance(record, dict):
            raise InvalidAssetError(f"Asset record must be an object, got {type(record).__name__}")

        def pick(*keys, default=None):
            for key in keys:
                if key in record:
                    return record[key]
            return default

        asset_id = pick("ID", "id")
        asset_type = pick("Type", "type")
        if asset_id is None:
            raise InvalidAssetError("Asset record is missing 'ID'")
        if asset_type is None:
            raise InvalidAssetError("Asset record is missing 'Type'", asset_id=str(asset_id))

        return cls(
            id=asset_id,
            type=asset_type,
            name=pick("Name", "name", default=""),
            is_public=pick("IsPublic", "is_public", default=False),
            tags=pick("Tags", "tags", default=()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert asset to dictionary for JSON output"""
        return {
            "ID": self.id,
            "Type": self.type.value,
            "Name": self.name,
            "IsPublic": self.is_public,
            "Tags": sorted(self.tags),
            "ComplianceScore": self.compliance_score,
            "Violations": [violation.to_dict() for violation in self.violations],
        }


@dataclass(frozen=True)
class RuleResult:
    """Outcome of a rule that fired"""
    violation: Violation
    penalty: int


class ComplianceRule(ABC):
    """Abstract base class for compliance rules

    Rules are stateless: they only look at an ``AssetState`` and must return
    the same result for the same state every time.
    """

    def __init__(self):
        self.rule_id: str = ""
        self.title: str = ""
        self.description: str = ""
        self.severity: Severity = Severity.MEDIUM
        self.asset_types: Tuple[AssetType, ...] = ()
        self._penalty: Optional[int] = None

    @property
    def penalty(self) -> int:
        """Score deduction when the rule fires"""
        if self._penalty is not None:
            return self._penalty
        return DEFAULT_PENALTIES[self.severity]

    @penalty.setter
    def penalty(self, value: int):
        self._penalty = value

    def applies_to(self, state: AssetState) -> bool:
        return not self.asset_types or state.type in self.asset_types

    @abstractmethod
    def is_violated(self, state: AssetState) -> bool:
        """Return True when the asset breaks this rule"""
        pass

    def evaluate(self, state: AssetState) -> Optional[RuleResult]:
        """Evaluate the rule against one asset, None means no violation"""
        if not self.applies_to(state) or not self.is_violated(state):
            return None
        return RuleResult(violation=self.create_violation(), penalty=self.penalty)

    def create_violation(self) -> Violation:
        """Helper method to create a violation"""
        return Violation(
            rule_id=self.rule_id,
            description=self.description,
            severity=self.severity,
        )

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.rule_id}>"


def has_tag(state: AssetState, tag: str) -> bool:
    return tag in state.tags
