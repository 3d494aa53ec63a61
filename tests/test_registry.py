"""Tests for index set registries."""

import pytest

from logalert.exceptions import TooManyAliasesError
from logalert.indexer import (
    AliasIndexSet,
    LegacyIndexSetRegistry,
    MultiIndexSetRegistry,
    refresh_index_sets,
)
from logalert.models import IndexRotationSnapshot, IndexSetConfig
from tests.conftest import FakeMetadataSource


def make_index_set(set_id, prefix, layout):
    return AliasIndexSet(
        IndexSetConfig(id=set_id, index_prefix=prefix),
        IndexRotationSnapshot.from_mapping(layout),
    )


@pytest.fixture
def default_set():
    return make_index_set(
        "default", "graylog", {"graylog_0": [], "graylog_1": ["graylog_deflector"]}
    )


@pytest.fixture
def audit_set():
    return make_index_set("audit", "audit", {"audit_4": ["audit_deflector"]})


class TestLegacyIndexSetRegistry:
    def test_delegates_to_single_set(self, default_set):
        registry = LegacyIndexSetRegistry(default_set)

        assert registry.get_all_index_sets() == [default_set]
        assert list(registry) == [default_set]
        assert len(registry) == 1
        assert registry.get("default") is default_set
        assert registry.get("missing") is None
        assert registry.get_all_index_names() == ["graylog_0", "graylog_1"]
        assert registry.get_write_index_wildcards() == ["graylog_*"]
        assert registry.get_write_index_aliases() == ["graylog_deflector"]
        assert registry.resolve_write_targets() == {"graylog_1"}
        assert registry.is_managed_index("graylog_0")
        assert not registry.is_managed_index("audit_4")
        assert registry.is_current_write_index_alias("graylog_deflector")
        assert registry.is_current_write_index("graylog_1")
        assert not registry.is_current_write_index("graylog_0")
        assert registry.is_up()

    def test_requires_index_set(self):
        with pytest.raises(ValueError):
            LegacyIndexSetRegistry(None)

    def test_no_write_target(self):
        registry = LegacyIndexSetRegistry(make_index_set("d", "graylog", {"graylog_0": []}))

        assert registry.resolve_write_targets() == set()
        assert not registry.is_current_write_index("graylog_0")

    def test_ambiguous_write_index_is_reported(self):
        registry = LegacyIndexSetRegistry(
            make_index_set(
                "d",
                "graylog",
                {"graylog_0": ["graylog_deflector"], "graylog_1": ["graylog_deflector"]},
            )
        )

        with pytest.raises(TooManyAliasesError):
            registry.is_current_write_index("graylog_0")
        with pytest.raises(TooManyAliasesError):
            registry.resolve_write_targets()


class TestMultiIndexSetRegistry:
    def test_union_in_insertion_order(self, default_set, audit_set):
        registry = MultiIndexSetRegistry([default_set, audit_set])

        assert [s.id for s in registry] == ["default", "audit"]
        assert registry.get_write_index_wildcards() == ["graylog_*", "audit_*"]
        assert registry.get_write_index_aliases() == ["graylog_deflector", "audit_deflector"]
        assert registry.get_all_index_names() == ["graylog_0", "graylog_1", "audit_4"]
        assert registry.resolve_write_targets() == {"graylog_1", "audit_4"}
        assert registry.is_managed_index("audit_0")
        assert registry.is_managed_index("graylog_7")
        assert not registry.is_managed_index("metrics_1")
        assert registry.is_current_write_index("audit_4")
        assert registry.is_current_write_index_alias("audit_deflector")
        assert registry.is_up()

    def test_empty_registry(self):
        registry = MultiIndexSetRegistry()

        assert len(registry) == 0
        assert registry.get_write_index_wildcards() == []
        assert registry.resolve_write_targets() == set()
        assert not registry.is_managed_index("graylog_0")
        assert not registry.is_up()

    def test_duplicate_id_rejected(self, default_set):
        registry = MultiIndexSetRegistry([default_set])

        with pytest.raises(ValueError):
            registry.add(make_index_set("default", "other", {}))

    def test_remove(self, default_set, audit_set):
        registry = MultiIndexSetRegistry([default_set, audit_set])

        assert registry.remove("default") is default_set
        assert registry.remove("default") is None
        assert registry.get_write_index_wildcards() == ["audit_*"]

    def test_iteration_sees_complete_membership(self, default_set, audit_set):
        registry = MultiIndexSetRegistry([default_set])
        view = registry.get_all_index_sets()

        registry.add(audit_set)

        assert view == [default_set]
        assert registry.get_all_index_sets() == [default_set, audit_set]

    def test_not_up_when_any_set_down(self, default_set):
        registry = MultiIndexSetRegistry(
            [default_set, make_index_set("audit", "audit", {"audit_0": []})]
        )

        assert not registry.is_up()

    def test_resolution_idempotent_without_rotation(self, default_set, audit_set):
        registry = MultiIndexSetRegistry([default_set, audit_set])

        assert registry.resolve_write_targets() == registry.resolve_write_targets()

    def test_resolution_reflects_rotation(self, default_set, audit_set):
        registry = MultiIndexSetRegistry([default_set, audit_set])

        default_set.update_snapshot(
            IndexRotationSnapshot.from_mapping(
                {"graylog_1": [], "graylog_2": ["graylog_deflector"]}
            )
        )

        assert registry.resolve_write_targets() == {"graylog_2", "audit_4"}


class TestRefreshIndexSets:
    @pytest.mark.asyncio
    async def test_refreshes_all_and_isolates_failures(self, default_set, audit_set):
        registry = MultiIndexSetRegistry([default_set, audit_set])
        source = FakeMetadataSource(
            {"audit_*": {"audit_4": [], "audit_5": ["audit_deflector"]}}
        )

        refreshed = await refresh_index_sets(registry, source)

        assert refreshed == 1
        assert source.requested == ["graylog_*", "audit_*"]
        assert registry.resolve_write_targets() == {"graylog_1", "audit_5"}
