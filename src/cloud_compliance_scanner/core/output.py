"""
Output formatting and report generation
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .exceptions import ReportPersistenceError, ReportSerializationError
from .framework import MAX_SCORE, Asset

logger = logging.getLogger(__name__)

DEFAULT_REPORT_FILE = "compliance_report.json"
REPORT_FILE_MODE = 0o644


class ReportStatus(str, Enum):
    WRITTEN = "WRITTEN"
    CLEAN_RUN = "CLEAN_RUN"


@dataclass
class ReportOutcome:
    """What the sink did with a batch of failed assets"""
    status: ReportStatus
    path: Optional[Path] = None
    asset_count: int = 0

    @property
    def is_clean(self) -> bool:
        return self.status is ReportStatus.CLEAN_RUN


class OutputEngine:
    """Handle output formatting and report generation"""

    @staticmethod
    def format_json(assets: Sequence[Asset]) -> List[Dict[str, Any]]:
        """Format assets as the JSON report payload"""
        return [asset.to_dict() for asset in assets]

    @staticmethod
    def format_summary_line(asset: Asset) -> str:
        """One-line console summary for an evaluated asset"""
        status = "PASS" if asset.compliance_score == MAX_SCORE else "FAIL"
        return (f"Asset ID: {asset.id} | Score: {asset.compliance_score} | "
                f"Violations: {len(asset.violations)} | Status: {status}")

    @staticmethod
    def serialize(assets: Sequence[Asset]) -> str:
        try:
            return json.dumps(OutputEngine.format_json(assets), indent=2)
        except (TypeError, ValueError) as e:
            raise ReportSerializationError(f"Could not encode compliance report: {e}") from e

    @staticmethod
    def save_report(assets: Sequence[Asset],
                    output_file: str = DEFAULT_REPORT_FILE) -> ReportOutcome:
        """Save failed assets as an indented JSON array.

        Nothing is written when ``assets`` is empty; the outcome reports a
        clean run instead. The file is replaced atomically so a failed write
        never leaves a partial report or damages an earlier one.
        """
        if not assets:
            logger.info("No compliance failures found. Clean run!")
            return ReportOutcome(status=ReportStatus.CLEAN_RUN)

        payload = OutputEngine.serialize(assets)
        output_path = Path(output_file)
        tmp_name = None

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(output_path.parent), prefix=f".{output_path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.write("\n")
            os.chmod(tmp_name, REPORT_FILE_MODE)
            os.replace(tmp_name, output_path)
            tmp_name = None

        except OSError as e:
            logger.error(f"Error saving report: {str(e)}")
            raise ReportPersistenceError(f"Could not write report to {output_path}: {e}") from e

        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info(f"Report for {len(assets)} failed assets saved to: {output_path}")
        return ReportOutcome(status=ReportStatus.WRITTEN, path=output_path,
                             asset_count=len(assets))
