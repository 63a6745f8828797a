"""Tests for the visibility registry and fetched record."""

from __future__ import annotations

import pytest

from colocated.visibility import FetchedFragmentsRecord, VisibilityRegistry


class TestVisibilityRegistry:
    """Tests for VisibilityRegistry."""

    def test_unknown_names_are_not_visible(self) -> None:
        registry = VisibilityRegistry()
        assert registry.is_visible("CapitalData") is False
        assert "CapitalData" not in registry

    def test_set_visible(self) -> None:
        registry = VisibilityRegistry()
        registry.set_visible("CapitalData", True)
        assert registry.is_visible("CapitalData") is True
        registry.set_visible("CapitalData", False)
        assert registry.is_visible("CapitalData") is False
        assert "CapitalData" in registry

    def test_set_visible_is_idempotent(self) -> None:
        registry = VisibilityRegistry()
        registry.set_visible("CapitalData", True)
        version = registry.version

        registry.set_visible("CapitalData", True)

        assert registry.version == version

    def test_changes_bump_version(self) -> None:
        registry = VisibilityRegistry()
        start = registry.version
        registry.set_visible("A", True)
        registry.set_visible("A", False)
        assert registry.version == start + 2

    def test_subscribers_are_notified_of_changes(self) -> None:
        registry = VisibilityRegistry()
        events: list[tuple[str, bool]] = []
        unsubscribe = registry.subscribe(lambda name, visible: events.append((name, visible)))

        registry.set_visible("A", True)
        registry.set_visible("A", True)
        unsubscribe()
        registry.set_visible("A", False)

        assert events == [("A", True)]

    def test_unsubscribe_twice_is_harmless(self) -> None:
        registry = VisibilityRegistry()
        unsubscribe = registry.subscribe(lambda name, visible: None)
        unsubscribe()
        unsubscribe()

    def test_snapshot_is_read_only_copy(self) -> None:
        registry = VisibilityRegistry()
        registry.set_visible("A", True)
        snapshot = registry.snapshot()

        registry.set_visible("A", False)

        assert snapshot["A"] is True
        with pytest.raises(TypeError):
            snapshot["A"] = False  # type: ignore[index]

    def test_claims_keep_fragment_visible_until_last_release(self) -> None:
        registry = VisibilityRegistry()
        assert registry.acquire("A") == 1
        assert registry.acquire("A") == 2

        assert registry.release("A") == 1
        assert registry.is_visible("A") is True

        assert registry.release("A") == 0
        assert registry.is_visible("A") is False

    def test_claim_counted_before_listeners_run(self) -> None:
        registry = VisibilityRegistry()
        seen: list[int] = []
        registry.subscribe(lambda name, visible: seen.append(registry.claims(name)))

        registry.acquire("A")
        registry.release("A")

        assert seen == [1, 0]

    def test_release_without_claim(self) -> None:
        registry = VisibilityRegistry()
        assert registry.release("A") == 0
        assert registry.is_visible("A") is False

    def test_set_visible_false_drops_claims(self) -> None:
        registry = VisibilityRegistry()
        registry.acquire("A")
        registry.acquire("A")

        registry.set_visible("A", False)

        assert registry.claims("A") == 0
        assert registry.is_visible("A") is False

    def test_clear(self) -> None:
        registry = VisibilityRegistry()
        registry.acquire("A")
        registry.clear()
        assert registry.is_visible("A") is False
        assert registry.claims("A") == 0


class TestFetchedFragmentsRecord:
    """Tests for FetchedFragmentsRecord."""

    def test_starts_empty(self) -> None:
        record = FetchedFragmentsRecord()
        assert len(record) == 0
        assert "CountryData" not in record

    def test_replace_swaps_whole_set(self) -> None:
        record = FetchedFragmentsRecord(["CountryData", "CapitalData"])
        record.replace(["CountryData"])
        assert record.names == frozenset({"CountryData"})
        assert "CapitalData" not in record

    def test_iteration(self) -> None:
        record = FetchedFragmentsRecord(["A", "B"])
        assert sorted(record) == ["A", "B"]
