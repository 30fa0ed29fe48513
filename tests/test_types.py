from datetime import datetime, timezone

import pytest

from imagescanner.types import (
    CONDITION_RECONCILING,
    CONDITION_STALLED,
    REASON_SCAN_REPORT_DECODE_ERROR,
    REASON_VULNERABILITY_OVERFLOW,
    Condition,
    ContainerImageScan,
    ContainerImageScanList,
    ContainerImageScanStatus,
    Image,
    ObjectMeta,
    ReferenceError,
    VulnerabilitySummary,
    find_status_condition,
    parse_named,
    remove_status_condition,
    set_status_condition,
    severity_counts,
)

NAME = "docker.io/nginxinc/nginx-unprivileged"
DIGEST = "sha256:a96370b18b3d7e70b7b34d49dcb621a805c15cf71217ee8c77be5a98cc793fd3"


def test_parse_named_canonical_round_trip():
    ref = parse_named(NAME)
    assert str(ref) == NAME
    assert ref.domain == "docker.io"
    assert ref.path == "nginxinc/nginx-unprivileged"


def test_parse_named_keeps_tag():
    ref = parse_named(NAME + ":1.25")
    assert ref.tag == "1.25"
    assert ref.name == NAME


@pytest.mark.parametrize("name", ["nginx", "nginxinc/nginx-unprivileged"])
def test_parse_named_rejects_familiar_names(name):
    with pytest.raises(ReferenceError, match="canonical"):
        parse_named(name)


def test_parse_named_rejects_uppercase():
    with pytest.raises(ReferenceError, match="lowercase"):
        parse_named("docker.io/library/NGINX")


def test_parse_named_rejects_hex_identifier():
    with pytest.raises(ReferenceError):
        parse_named(DIGEST.split(":")[1])


def test_parse_named_rejects_bad_digest_length():
    with pytest.raises(ReferenceError):
        parse_named(NAME + "@sha256:" + "a" * 40)


def test_image_canonical():
    ref = Image(NAME, DIGEST).canonical()
    assert str(ref) == f"{NAME}@{DIGEST}"
    assert ref.digest == DIGEST


def test_image_canonical_invalid_digest():
    with pytest.raises(ReferenceError, match="invalid digest format"):
        Image(NAME, "not-a-digest").canonical()


def test_image_canonical_invalid_name():
    with pytest.raises(ReferenceError):
        Image("nginx", DIGEST).canonical()


def test_severity_counts():
    assert severity_counts(None) is None
    counts = {"HIGH": 2}
    assert severity_counts(VulnerabilitySummary(severity_count=counts)) == counts


def _cis(generation, observed, conditions):
    return ContainerImageScan(
        metadata=ObjectMeta(name="scan", namespace="default", generation=generation),
        status=ContainerImageScanStatus(observed_generation=observed, conditions=conditions),
    )


def test_vulnerability_overflow_detected():
    stalled = Condition(CONDITION_STALLED, "True", REASON_VULNERABILITY_OVERFLOW)
    assert _cis(2, 2, [stalled]).has_vulnerability_overflow() is True


def test_vulnerability_overflow_under_reconciliation():
    stalled = Condition(CONDITION_STALLED, "True", REASON_VULNERABILITY_OVERFLOW)
    assert _cis(3, 2, [stalled]).has_vulnerability_overflow() is False


def test_vulnerability_overflow_other_reason_or_missing():
    other = Condition(CONDITION_STALLED, "True", REASON_SCAN_REPORT_DECODE_ERROR)
    assert _cis(1, 1, [other]).has_vulnerability_overflow() is False
    assert _cis(1, 1, []).has_vulnerability_overflow() is False


def test_set_status_condition_adds_and_stamps_time():
    conditions = []
    changed = set_status_condition(
        conditions, Condition(CONDITION_RECONCILING, "True", "ScanJobCreated")
    )
    assert changed is True
    found = find_status_condition(conditions, CONDITION_RECONCILING)
    assert found.reason == "ScanJobCreated"
    assert found.last_transition_time is not None


def test_set_status_condition_unchanged():
    stamp = datetime(2020, 1, 1, tzinfo=timezone.utc)
    conditions = [Condition(CONDITION_RECONCILING, "True", "R", last_transition_time=stamp)]
    assert set_status_condition(conditions, Condition(CONDITION_RECONCILING, "True", "R")) is False
    assert conditions[0].last_transition_time == stamp


def test_set_status_condition_status_change_updates_time():
    stamp = datetime(2020, 1, 1, tzinfo=timezone.utc)
    conditions = [Condition(CONDITION_RECONCILING, "True", "R", last_transition_time=stamp)]
    assert set_status_condition(conditions, Condition(CONDITION_RECONCILING, "False", "R")) is True
    assert len(conditions) == 1
    assert conditions[0].status == "False"
    assert conditions[0].last_transition_time > stamp


def test_remove_status_condition():
    conditions = [
        Condition(CONDITION_RECONCILING, "True"),
        Condition(CONDITION_STALLED, "True"),
    ]
    assert remove_status_condition(conditions, CONDITION_STALLED) is True
    assert find_status_condition(conditions, CONDITION_STALLED) is None
    assert [c.type for c in conditions] == [CONDITION_RECONCILING]
    assert remove_status_condition(conditions, CONDITION_STALLED) is False


def test_resource_kinds():
    assert ContainerImageScan().kind == "ContainerImageScan"
    assert ContainerImageScanList().api_version == "stas.statnett.no/v1alpha1"