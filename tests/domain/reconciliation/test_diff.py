from __future__ import annotations

from fabdrift.domain.reconciliation import compare
from fabdrift.domain.reconciliation.diff import index_by_key
from tests.helpers.fakes import make_resource


def test_missing_service_is_reported() -> None:
    expected = [make_resource("ConfigMap", "config1"), make_resource("Service", "service1")]
    actual = [make_resource("ConfigMap", "config1")]

    result = compare(expected, actual)

    assert [str(r) for r in result.missing] == ["Service/service1"]
    assert result.extra == ()
    assert result.different == ()
    assert result.summary() == "1 missing, 0 extra, 0 different"


def test_identical_sets_are_empty() -> None:
    resources = [make_resource("ConfigMap", "a"), make_resource("Secret", "b")]

    assert compare(resources, list(reversed(resources))).is_empty


def test_unexpected_resources_are_extra() -> None:
    result = compare([], [make_resource("Pod", "stray")])

    assert [str(r) for r in result.extra] == ["Pod/stray"]
    assert not result.is_empty


def test_same_name_different_kind_does_not_match() -> None:
    result = compare([make_resource("Service", "web")], [make_resource("ConfigMap", "web")])

    assert [str(r) for r in result.missing] == ["Service/web"]
    assert [str(r) for r in result.extra] == ["ConfigMap/web"]


def test_api_version_and_expected_labels_are_compared() -> None:
    expected = make_resource(
        "Switch",
        "leaf-01",
        api_version="wiring.githedgehog.com/v1beta1",
        labels={"role": "leaf", "model": "DS2000"},
    )
    actual = make_resource(
        "Switch",
        "leaf-01",
        api_version="wiring.githedgehog.com/v1",
        labels={"role": "spine", "extra": "ignored"},
    )

    (entry,) = compare([expected], [actual]).different

    assert entry.key == ("Switch", "leaf-01")
    assert entry.differences == (
        "apiVersion: expected wiring.githedgehog.com/v1beta1, got wiring.githedgehog.com/v1",
        "label role: expected leaf, got spine",
        "label model: expected DS2000, got <undefined>",
    )


def test_namespace_and_extra_labels_do_not_matter() -> None:
    expected = make_resource("ConfigMap", "a", namespace="it-1", labels={"runId": "1"})
    actual = make_resource("ConfigMap", "a", namespace="other", labels={"runId": "1", "x": "y"})

    assert compare([expected], [actual]).is_empty


def test_later_duplicate_wins() -> None:
    first = make_resource("ConfigMap", "a", labels={"v": "1"})
    second = make_resource("ConfigMap", "a", labels={"v": "2"})

    assert index_by_key([first, second]) == {("ConfigMap", "a"): second}


def test_missing_and_extra_are_mirror_images() -> None:
    left = [
        make_resource("Switch", "leaf-01"),
        make_resource("Switch", "leaf-02"),
        make_resource("Server", "srv-001"),
    ]
    right = [make_resource("Switch", "leaf-01"), make_resource("Server", "srv-002")]

    forward = compare(left, right)
    backward = compare(right, left)

    assert {r.key for r in forward.missing} == {r.key for r in backward.extra}
    assert {r.key for r in forward.extra} == {r.key for r in backward.missing}


def test_duplicate_keys_are_reported_per_side() -> None:
    leaf = make_resource("Switch", "leaf-1")
    result = compare([leaf, make_resource("Switch", "leaf-1", labels={"v": "2"})], [leaf])

    assert [str(r) for r in result.duplicate_expected] == ["Switch/leaf-1"]
    assert result.duplicate_actual == ()
    assert not result.is_empty
    assert result.summary() == "0 missing, 0 extra, 1 different, 1 duplicated"


def test_empty_label_value_is_not_shown_as_undefined() -> None:
    expected = make_resource("Server", "srv-001", labels={"team": "a"})
    actual = make_resource("Server", "srv-001", labels={"team": ""})

    (entry,) = compare([expected], [actual]).different

    assert entry.differences == ("label team: expected a, got ",)
