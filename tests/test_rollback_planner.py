"""Tests for the RollbackPlanner."""

import pytest

from raidguard.datatypes.command_datatypes import CommandLogEntry, RollbackLogEntry
from raidguard.datatypes.rollback_datatypes import ReversalAction
from raidguard.rollback.rollback_planner import INVERSE_VERBS, RollbackPlanner


@pytest.fixture()
def planner() -> RollbackPlanner:
    return RollbackPlanner()


def _logs(*commands):
    return [RollbackLogEntry(id=str(i), command=cmd) for i, cmd in enumerate(commands, 1)]


def test_single_ban_round_trip(planner):
    reversals = planner.calculate_reversals([RollbackLogEntry(id="1", command=":ban u1")])

    assert reversals == [ReversalAction(original_log_id="1", command=":unban u1", reason="Rollback of :ban u1")]


def test_reverses_ban_commands_ignoring_extra_args(planner):
    reversals = planner.calculate_reversals(_logs(":ban user1 reason", ":ban user2"))

    assert [r.command for r in reversals] == [":unban user1", ":unban user2"]
    assert reversals[0].reason == "Rollback of :ban user1 reason"


def test_reverses_unadmin_and_unmod(planner):
    reversals = planner.calculate_reversals(_logs(":unadmin user1", ":unmod user2"))

    assert [r.command for r in reversals] == [":admin user1", ":mod user2"]


def test_unban_becomes_ban(planner):
    reversals = planner.calculate_reversals(_logs(":unban user1"))

    assert reversals[0].command == ":ban user1"


def test_ignores_irrelevant_commands(planner):
    assert planner.calculate_reversals(_logs(":fly me", ":god me")) == []


def test_mixed_case_normalizes_verb_and_keeps_target(planner):
    reversals = planner.calculate_reversals(_logs(":BAN user1", ":UnAdmin User2"))

    assert reversals[0].command == ":unban user1"
    assert reversals[1].command == ":admin User2"
    assert reversals[1].reason == "Rollback of :UnAdmin User2"


def test_grants_are_not_reversed(planner):
    assert planner.calculate_reversals(_logs(":admin user1", ":mod user2")) == []


def test_missing_target_or_empty_command_skipped(planner):
    assert planner.calculate_reversals(_logs(":ban", "", "   ", "ban user1")) == []


def test_empty_input(planner):
    assert planner.calculate_reversals([]) == []


def test_order_preserved_and_ids_traced(planner):
    logs = _logs(":fly x", ":unmod b", ":god y", ":ban a", ":unban c")

    reversals = planner.calculate_reversals(logs)

    assert [r.original_log_id for r in reversals] == ["2", "4", "5"]
    assert [r.command for r in reversals] == [":mod b", ":unban a", ":ban c"]


def test_repeated_calls_are_equal(planner):
    logs = _logs(":ban a", ":unmod b")

    assert planner.calculate_reversals(logs) == planner.calculate_reversals(logs)


def test_accepts_command_log_entries(planner):
    entry = CommandLogEntry(player_id="7", command=":ban Target", prc_timestamp=1, id="log-9")

    assert planner.plan_for(entry) == ReversalAction("log-9", ":unban Target", "Rollback of :ban Target")


def test_custom_table_extends_defaults():
    planner = RollbackPlanner({**INVERSE_VERBS, "jail": "unjail"})

    reversals = planner.calculate_reversals(_logs(":jail bob", ":ban amy"))

    assert [r.command for r in reversals] == [":unjail bob", ":unban amy"]
    assert ":jail" in planner.invertible_verbs


def test_default_table_is_read_only():
    with pytest.raises(TypeError):
        INVERSE_VERBS[":kick"] = ":unkick"  # type: ignore[index]
