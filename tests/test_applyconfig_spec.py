from datetime import datetime, timedelta, timezone

import pytest

from imagescanner.applyconfig_spec import (
    ContainerImageScanSpecApplyConfiguration,
    ContainerImageScanStatusApplyConfiguration,
    ImageApplyConfiguration,
    ImageScanSpecApplyConfiguration,
    ScanConfigApplyConfiguration,
    VulnerabilityApplyConfiguration,
    VulnerabilitySummaryApplyConfiguration,
    WorkloadApplyConfiguration,
)
from imagescanner.types import Condition

DIGEST = "sha256:a96370b18b3d7e70b7b34d49dcb621a805c15cf71217ee8c77be5a98cc793fd3"
IMAGE = "docker.io/nginxinc/nginx-unprivileged"


def test_image_empty_to_dict_omits_everything():
    assert ImageApplyConfiguration().to_dict() == {}


def test_image_with_chain_returns_same_object():
    image = ImageApplyConfiguration()
    assert image.with_name(IMAGE) is image
    assert image.with_digest(DIGEST) is image
    assert image.to_dict() == {"name": IMAGE, "digest": DIGEST}


def test_image_last_call_wins():
    image = ImageApplyConfiguration().with_name("first").with_name(IMAGE)
    assert image.name == IMAGE


def test_scan_config_keys():
    config = ScanConfigApplyConfiguration().with_min_severity("HIGH").with_ignore_unfixed(False)
    assert config.to_dict() == {"minSeverity": "HIGH", "ignoreUnfixed": False}


def test_image_scan_spec_combines_image_and_scan_config():
    spec = (
        ImageScanSpecApplyConfiguration()
        .with_name(IMAGE)
        .with_digest(DIGEST)
        .with_min_severity("CRITICAL")
        .with_ignore_unfixed(True)
    )
    assert spec.to_dict() == {
        "name": IMAGE,
        "digest": DIGEST,
        "minSeverity": "CRITICAL",
        "ignoreUnfixed": True,
    }


def test_container_image_scan_spec_with_workload_and_tag():
    workload = (
        WorkloadApplyConfiguration()
        .with_group("apps")
        .with_kind("Deployment")
        .with_name("web")
        .with_container_name("nginx")
    )
    spec = (
        ContainerImageScanSpecApplyConfiguration()
        .with_name(IMAGE)
        .with_digest(DIGEST)
        .with_tag("latest")
        .with_workload(workload)
    )
    result = spec.to_dict()
    assert result["tag"] == "latest"
    assert result["workload"] == {
        "group": "apps",
        "kind": "Deployment",
        "name": "web",
        "containerName": "nginx",
    }
    assert result["name"] == IMAGE
    assert "minSeverity" not in result


def test_container_image_scan_spec_without_workload_omits_key():
    spec = ContainerImageScanSpecApplyConfiguration().with_tag("v1")
    assert spec.to_dict() == {"tag": "v1"}


def test_empty_string_is_kept_when_set():
    workload = WorkloadApplyConfiguration().with_group("")
    assert workload.to_dict() == {"group": ""}


def test_vulnerability_all_fields():
    vulnerability = (
        VulnerabilityApplyConfiguration()
        .with_vulnerability_id("CVE-2023-0001")
        .with_pkg_name("openssl")
        .with_installed_version("1.0")
        .with_severity("HIGH")
        .with_pkg_path("/usr/lib")
        .with_fixed_version("1.1")
        .with_title("overflow")
        .with_primary_url("https://example.com/cve")
    )
    assert vulnerability.to_dict() == {
        "vulnerabilityID": "CVE-2023-0001",
        "pkgName": "openssl",
        "installedVersion": "1.0",
        "severity": "HIGH",
        "pkgPath": "/usr/lib",
        "fixedVersion": "1.1",
        "title": "overflow",
        "primaryURL": "https://example.com/cve",
    }


def test_severity_count_merges_and_overwrites():
    summary = VulnerabilitySummaryApplyConfiguration()
    summary.with_severity_count({"HIGH": 2, "LOW": 1})
    summary.with_severity_count({"HIGH": 5})
    assert summary.severity_count == {"HIGH": 5, "LOW": 1}


def test_severity_count_empty_entries_leave_it_unset():
    summary = VulnerabilitySummaryApplyConfiguration().with_severity_count({})
    assert summary.severity_count is None
    assert summary.to_dict() == {}


def test_summary_counts_to_dict():
    summary = (
        VulnerabilitySummaryApplyConfiguration()
        .with_severity_count({"CRITICAL": 1})
        .with_fixed_count(3)
        .with_unfixed_count(0)
    )
    assert summary.to_dict() == {
        "severityCount": {"CRITICAL": 1},
        "fixedCount": 3,
        "unfixedCount": 0,
    }


def test_status_empty_to_dict():
    assert ContainerImageScanStatusApplyConfiguration().to_dict() == {}


def test_status_scalars_and_time_format():
    scanned = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    status = (
        ContainerImageScanStatusApplyConfiguration()
        .with_observed_generation(1)
        .with_last_scan_job_uid("job-uid")
        .with_last_scan_time(scanned)
        .with_last_successful_scan_time(scanned)
    )
    result = status.to_dict()
    assert result["observedGeneration"] == 1
    assert result["lastScanJobUID"] == "job-uid"
    assert result["lastScanTime"] == "2023-01-02T03:04:05Z"
    assert result["lastSuccessfulScanTime"] == result["lastScanTime"]


def test_status_time_is_converted_to_utc():
    local = datetime(2023, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))
    status = ContainerImageScanStatusApplyConfiguration().with_last_scan_time(local)
    assert status.to_dict()["lastScanTime"] == "2023-01-02T03:04:05Z"


def test_status_conditions_append_copies():
    condition = Condition(type="Reconciling", status="True", reason="ScanJobCreated")
    status = ContainerImageScanStatusApplyConfiguration().with_conditions(condition)
    status.with_conditions(Condition(type="Stalled", status="False"))
    condition.reason = "changed"
    assert [c.type for c in status.conditions] == ["Reconciling", "Stalled"]
    first = status.to_dict()["conditions"][0]
    assert first["reason"] == "ScanJobCreated"
    assert first["type"] == "Reconciling"
    assert first["status"] == "True"


def test_status_vulnerabilities_appended_in_order():
    first = VulnerabilityApplyConfiguration().with_vulnerability_id("CVE-1")
    second = VulnerabilityApplyConfiguration().with_vulnerability_id("CVE-2")
    status = ContainerImageScanStatusApplyConfiguration().with_vulnerabilities(first)
    status.with_vulnerabilities(second)
    first.with_vulnerability_id("mutated")
    assert status.to_dict()["vulnerabilities"] == [
        {"vulnerabilityID": "CVE-1"},
        {"vulnerabilityID": "CVE-2"},
    ]


def test_status_rejects_none_vulnerability():
    status = ContainerImageScanStatusApplyConfiguration()
    with pytest.raises(ValueError):
        status.with_vulnerabilities(VulnerabilityApplyConfiguration(), None)
    assert status.vulnerabilities == []


def test_status_with_summary():
    summary = VulnerabilitySummaryApplyConfiguration().with_fixed_count(2)
    status = ContainerImageScanStatusApplyConfiguration().with_vulnerability_summary(summary)
    assert status.to_dict() == {"vulnerabilitySummary": {"fixedCount": 2}}