import json
import os
import stat

import pytest

from cloud_compliance_scanner.core.engine import ComplianceEvaluator
from cloud_compliance_scanner.core.exceptions import (
    ReportPersistenceError, ReportSerializationError,
)
from cloud_compliance_scanner.core.framework import Asset, AssetType
from cloud_compliance_scanner.core.output import OutputEngine, ReportStatus
from cloud_compliance_scanner.core.report import filter_non_compliant


@pytest.fixture
def evaluated(default_rules, mock_assets):
    return ComplianceEvaluator(default_rules).evaluate_all(mock_assets).assets


class TestFilterNonCompliant:

    def test_keeps_failures_in_order(self, evaluated):
        failed = filter_non_compliant(evaluated)
        assert [a.id for a in failed] == ["gcp-001", "gcp-002"]

    def test_round_trip(self, evaluated):
        failed = filter_non_compliant(list(reversed(evaluated)))
        assert [a.id for a in failed] == ["gcp-002", "gcp-001"]
        assert all(a.compliance_score < 100 for a in failed)

    def test_all_clean_returns_empty_list(self, default_rules, private_bucket):
        ComplianceEvaluator.evaluate(default_rules, private_bucket)
        assert filter_non_compliant([private_bucket]) == []
        assert filter_non_compliant([]) == []

    def test_score_is_the_only_criterion(self, private_bucket):
        private_bucket.compliance_score = 100
        assert filter_non_compliant([private_bucket]) == []
        private_bucket.compliance_score = 99
        assert filter_non_compliant([private_bucket]) == [private_bucket]

    def test_unevaluated_asset_is_an_error(self, private_bucket):
        with pytest.raises(ValueError):
            filter_non_compliant([private_bucket])


class TestOutputEngine:

    def test_summary_lines(self, evaluated):
        lines = [OutputEngine.format_summary_line(a) for a in evaluated]
        assert lines == [
            "Asset ID: gcp-001 | Score: 50 | Violations: 1 | Status: FAIL",
            "Asset ID: gcp-002 | Score: 70 | Violations: 1 | Status: FAIL",
            "Asset ID: gcp-003 | Score: 100 | Violations: 0 | Status: PASS",
        ]

    def test_writes_indented_report(self, tmp_path, evaluated):
        output = tmp_path / "reports" / "compliance_report.json"
        outcome = OutputEngine.save_report(filter_non_compliant(evaluated), str(output))

        assert outcome.status is ReportStatus.WRITTEN
        assert outcome.asset_count == 2
        assert outcome.path == output

        text = output.read_text(encoding="utf-8")
        assert text.startswith("[\n  {")
        report = json.loads(text)
        assert [entry["ID"] for entry in report] == ["gcp-001", "gcp-002"]
        assert set(report[0]) == {"ID", "Type", "Name", "IsPublic", "Tags",
                                  "ComplianceScore", "Violations"}
        assert report[0]["Violations"] == [{
            "RuleID": "SEC_R01",
            "Description": "Publicly exposed storage bucket.",
            "Severity": "CRITICAL",
        }]
        assert report[1]["ComplianceScore"] == 70

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_report_permissions(self, tmp_path, evaluated):
        output = tmp_path / "compliance_report.json"
        OutputEngine.save_report(filter_non_compliant(evaluated), str(output))
        assert stat.S_IMODE(output.stat().st_mode) == 0o644

    def test_clean_run_writes_nothing(self, tmp_path):
        output = tmp_path / "compliance_report.json"
        outcome = OutputEngine.save_report([], str(output))
        assert outcome.status is ReportStatus.CLEAN_RUN
        assert outcome.is_clean
        assert outcome.path is None
        assert not output.exists()

    def test_serialization_failure_leaves_no_file(self, tmp_path, evaluated, monkeypatch):
        output = tmp_path / "compliance_report.json"
        failed = filter_non_compliant(evaluated)
        monkeypatch.setattr(Asset, "to_dict", lambda self: {"ID": object()})

        with pytest.raises(ReportSerializationError) as excinfo:
            OutputEngine.save_report(failed, str(output))
        assert isinstance(excinfo.value.__cause__, TypeError)
        assert list(tmp_path.iterdir()) == []

    def test_persistence_failure_keeps_previous_report(self, tmp_path, evaluated, monkeypatch):
        output = tmp_path / "compliance_report.json"
        output.write_text("previous", encoding="utf-8")

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(ReportPersistenceError) as excinfo:
            OutputEngine.save_report(filter_non_compliant(evaluated), str(output))

        assert isinstance(excinfo.value.__cause__, OSError)
        assert output.read_text(encoding="utf-8") == "previous"
        assert [p.name for p in tmp_path.iterdir()] == ["compliance_report.json"]

    def test_unwritable_location(self, tmp_path, evaluated):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(ReportPersistenceError):
            OutputEngine.save_report(filter_non_compliant(evaluated),
                                     str(blocker / "compliance_report.json"))

    def test_format_json_of_clean_asset(self):
        asset = Asset(id="b-1", type=AssetType.STORAGE_BUCKET)
        asset.compliance_score = 100
        assert OutputEngine.format_json([asset])[0]["Violations"] == []
