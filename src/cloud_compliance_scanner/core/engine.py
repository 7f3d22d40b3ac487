"""
Compliance evaluator that applies rules to assets and scores them
"""

import logging
import concurrent.futures
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .exceptions import InvalidAssetError
from .framework import MAX_SCORE, Asset, AssetType, ComplianceRule

logger = logging.getLogger(__name__)


@dataclass
class AssetError:
    """An asset rejected by a lenient scan"""
    asset_id: str
    message: str


@dataclass
class ScanResult:
    """Evaluated assets of one batch plus any rejected records"""
    assets: List[Asset] = field(default_factory=list)
    errors: List[AssetError] = field(default_factory=list)

    @property
    def compliant(self) -> List[Asset]:
        return [asset for asset in self.assets if asset.compliance_score == MAX_SCORE]

    @property
    def non_compliant(self) -> List[Asset]:
        return [asset for asset in self.assets if asset.compliance_score < MAX_SCORE]

    @property
    def total_violations(self) -> int:
        return sum(len(asset.violations) for asset in self.assets)

    def summary(self) -> Dict[str, Any]:
        by_severity: Dict[str, int] = {}
        for asset in self.assets:
            for violation in asset.violations:
                severity = violation.severity.value
                by_severity[severity] = by_severity.get(severity, 0) + 1

        return {
            "total_assets": len(self.assets),
            "passed": len(self.compliant),
            "failed": len(self.non_compliant),
            "total_violations": self.total_violations,
            "by_severity": by_severity,
            "errors": len(self.errors),
        }


class ComplianceEvaluator:
    """Applies an ordered rule set to assets"""

    def __init__(self, rules: Sequence[ComplianceRule], strict: bool = True,
                 parallel: bool = False, max_workers: int = 5):
        self.rules = list(rules)
        self.strict = strict
        self.parallel = parallel
        self.max_workers = max_workers

    @staticmethod
    def validate_asset(asset: Asset):
        """Fail fast on assets whose identity fields are malformed"""
        if not isinstance(asset, Asset):
            raise InvalidAssetError(f"Expected an Asset, got {type(asset).__name__}")
        if not isinstance(asset.id, str) or not asset.id.strip():
            raise InvalidAssetError("Asset id must be a non-empty string")
        if not isinstance(asset.type, AssetType):
            raise InvalidAssetError(f"Asset type {asset.type!r} is not a known type",
                                    asset_id=asset.id)
        if asset.tags is None:
            raise InvalidAssetError("Asset tags must not be None", asset_id=asset.id)

    @staticmethod
    def evaluate(rules: Sequence[ComplianceRule], asset: Asset) -> None:
        """Score one asset against the rules, recording every violation"""
        ComplianceEvaluator.validate_asset(asset)

        # Rules see a frozen snapshot, never the score or prior violations
        state = asset.snapshot()
        violations = []
        score = MAX_SCORE

        for rule in rules:
            result = rule.evaluate(state)
            if result is None:
                continue
            logger.debug(f"Rule {rule.rule_id} fired on {asset.id} (-{result.penalty})")
            violations.append(result.violation)
            score -= result.penalty

        asset.violations = violations
        asset.compliance_score = max(0, min(MAX_SCORE, score))

    def _evaluate_one(self, asset: Asset) -> Asset:
        self.evaluate(self.rules, asset)
        return asset

    def evaluate_all(self, assets: Sequence[Asset]) -> ScanResult:
        """Evaluate a batch of assets, preserving input order"""
        assets = list(assets)
        result = ScanResult()

        if not assets:
            logger.warning("No assets supplied for evaluation")
            return result

        logger.info(f"Evaluating {len(assets)} assets against {len(self.rules)} rules...")

        if self.parallel and len(assets) > 1:
            # Each worker mutates only the asset it was handed
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self._evaluate_one, asset) for asset in assets]
                outcomes = []
                for asset, future in zip(assets, futures):
                    try:
                        outcomes.append((asset, future.result(), None))
                    except InvalidAssetError as e:
                        outcomes.append((asset, None, e))
        else:
            outcomes = []
            for asset in assets:
                try:
                    outcomes.append((asset, self._evaluate_one(asset), None))
                except InvalidAssetError as e:
                    outcomes.append((asset, None, e))
                    if self.strict:
                        break

        for asset, evaluated, error in outcomes:
            if error is None:
                result.assets.append(evaluated)
                continue
            asset_id = error.asset_id or getattr(asset, "id", None) or "<unknown>"
            if self.strict:
                logger.error(f"Aborting scan, asset {asset_id} is malformed: {error}")
                raise error
            logger.error(f"Skipping malformed asset {asset_id}: {error}")
            result.errors.append(AssetError(asset_id=str(asset_id), message=str(error)))

        logger.info(f"Evaluation completed. {len(result.non_compliant)} of "
                    f"{len(result.assets)} assets are non-compliant")
        return result
