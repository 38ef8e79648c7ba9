"""Tests for version parsing and the compatibility prober."""

from __future__ import annotations

import pytest

from soakbench.compat import CompatibilityProber, compare_versions, parse_version, version_at_least
from soakbench.core.options import CompatibilitySettings
from soakbench.probes import HostProbes


class TestVersions:
    @pytest.mark.parametrize(
        "version,expected",
        [
            ("7.2.0", (7, 2, 0)),
            ("4.2.0-beta", (4, 2, 0)),
            ("10.x.3", (10, 0, 3)),
            ("3", (3,)),
        ],
    )
    def test_parse(self, version, expected):
        assert parse_version(version) == expected

    def test_compare_pads_missing_components(self):
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("7.10.0", "7.9.9") == 1
        assert compare_versions("6.9", "7.0.0") == -1

    def test_version_at_least(self):
        assert version_at_least("7.0.0", "7.0.0")
        assert not version_at_least("6.99", "7")


def _all_checks(**overrides) -> HostProbes:
    values = dict(
        target_app_version=lambda: "7.2.0",
        host_runtime_version=lambda: "3.12.1",
        feature_available=lambda name: True,
        screen_capture=lambda: True,
        permissions_granted=lambda: True,
        touch_simulation=lambda: True,
    )
    values.update(overrides)
    return HostProbes(**values)


class TestProber:
    def test_compatible_environment(self, tmp_path):
        settings = CompatibilitySettings(file_check_dir=str(tmp_path))
        report = CompatibilityProber(settings, _all_checks()).run()

        assert report.compatible is True
        assert report.status == "completed"
        assert report.target_system_compatibility.detected_version == "7.2.0"
        assert report.host_runtime_compatibility.features == {
            "asyncio": True,
            "threads": True,
            "files": True,
            "subprocess": True,
        }
        assert report.environment_checks.all_passed
        assert report.ended_at is not None

    def test_target_too_old(self):
        report = CompatibilityProber(probes=_all_checks(target_app_version=lambda: "6.1.0")).run()

        target = report.target_system_compatibility
        assert target.compatible is False
        assert target.issues == ["Target version too low. Required: 7.0.0, Found: 6.1.0"]
        assert report.compatible is False
        assert report.status == "failed"

    def test_undetected_target(self, compatible_probes):
        compatible_probes.target_app_version = None
        report = CompatibilityProber(probes=compatible_probes).run()

        assert report.target_system_compatibility.issues == ["Could not detect Target version"]
        assert report.target_system_compatibility.detected_version is None

    def test_failing_version_probe_is_treated_as_undetected(self):
        def broken():
            raise RuntimeError("adb offline")

        report = CompatibilityProber(probes=_all_checks(target_app_version=broken)).run()
        assert report.target_system_compatibility.compatible is False
        assert report.compatible is False

    def test_missing_feature(self):
        probes = _all_checks(feature_available=lambda name: name != "threads")
        host = CompatibilityProber(probes=probes).run().host_runtime_compatibility

        assert host.compatible is False
        assert host.features["threads"] is False
        assert "Required feature not available: threads" in host.issues

    def test_host_name_appears_in_issues(self):
        settings = CompatibilitySettings(host_name="python", host_required_version="4.0")
        host = CompatibilityProber(settings, _all_checks()).run().host_runtime_compatibility
        assert host.issues == ["Python version too low. Required: 4.0, Found: 3.12.1"]

    def test_environment_checks_do_not_gate_by_default(self, compatible_probes):
        report = CompatibilityProber(probes=compatible_probes).run()

        assert report.environment_checks.screen_capture is False
        assert report.environment_checks.all_passed is False
        assert report.compatible is True

    def test_environment_checks_can_gate(self, compatible_probes):
        settings = CompatibilitySettings(environment_gates_aggregate=True)
        report = CompatibilityProber(settings, compatible_probes).run()

        assert report.versions_compatible is True
        assert report.compatible is False
        assert report.environment_gates_aggregate is True

    def test_unwritable_file_check_dir(self, tmp_path):
        settings = CompatibilitySettings(file_check_dir=str(tmp_path / "missing"))
        report = CompatibilityProber(settings, _all_checks()).run()
        assert report.environment_checks.file_access is False

    def test_each_run_starts_fresh(self, compatible_probes):
        compatible_probes.target_app_version = None
        prober = CompatibilityProber(probes=compatible_probes)
        prober.run()
        report = prober.run()
        assert report.target_system_compatibility.issues == ["Could not detect Target version"]
