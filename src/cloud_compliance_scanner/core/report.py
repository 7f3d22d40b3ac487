"""
Selection of assets that belong in the compliance report
"""

from typing import List, Sequence
from .framework import MAX_SCORE, Asset


def filter_non_compliant(assets: Sequence[Asset]) -> List[Asset]:
    """Return every evaluated asset scoring below the maximum, in input order.

    The score alone decides membership. An empty list means every asset is
    compliant and is not an error.
    """
    failed = []
    for asset in assets:
        if asset.compliance_score is None:
            raise ValueError(f"Asset {asset.id} has not been evaluated")
        if asset.compliance_score < MAX_SCORE:
            failed.append(asset)
    return failed
