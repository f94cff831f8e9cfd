"""Tests for ubiety_build.dsl."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from ubiety_build.dsl import TargetBuilder, build, check, param_set, target, targets
from ubiety_build.model import Guard, Target


def noop(ctx):
    pass


class TestTargetBuilder:
    def test_collects_all_attributes(self):
        t = (
            TargetBuilder("Publish")
            .depends_on("Pack")
            .before("Announce")
            .after("Test")
            .requires_param("nuget_key")
            .only_when(lambda ctx: True)
            .unlisted()
            .describe("push packages")
            .executes(noop)
            .build()
        )
        assert t.name == "Publish"
        assert t.depends_on == ["Pack"]
        assert t.before == ["Announce"]
        assert t.after == ["Test"]
        assert [g.parameter for g in t.requires] == ["nuget_key"]
        assert len(t.only_when) == 1
        assert t.unlisted is True
        assert t.description == "push packages"
        assert t.action is noop

    def test_plain_predicates_become_guards(self):
        def is_release(ctx):
            return ctx.release

        t = build("A").requires(is_release).build()
        guard = t.requires[0]
        assert isinstance(guard, Guard)
        assert guard.description == "is_release"
        assert guard(SimpleNamespace(release=True)) is True

    def test_second_action_rejected(self):
        with pytest.raises(ValueError, match="already has an action"):
            build("A").executes(noop).executes(noop)

    def test_aggregate_target_has_no_action(self):
        t = build("CI").depends_on("Test").build()
        assert t.action is None


class TestTargetHelper:
    def test_defaults(self):
        t = target("Clean")
        assert t == Target(name="Clean")

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            target("  ")


class TestTargets:
    def test_mixes_builders_and_targets_in_order(self):
        ts = targets(build("A"), target("B"), build("C").depends_on("A"))
        assert [t.name for t in ts] == ["A", "B", "C"]
        assert all(isinstance(t, Target) for t in ts)


class TestGuards:
    @pytest.mark.parametrize(
        "value, expected",
        [("abc", True), ("", False), ("   ", False), (None, False), (0, True)],
    )
    def test_param_set(self, value, expected):
        assert param_set("key")(SimpleNamespace(key=value)) is expected

    def test_param_set_missing_attribute(self):
        assert param_set("key")(SimpleNamespace()) is False

    def test_check_coerces_to_bool(self):
        assert check("non-empty", lambda ctx: [1])(None) is True
