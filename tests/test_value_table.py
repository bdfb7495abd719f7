"""
Tests for the value table and the SARSA update rule.
"""
import pytest

from sarsa_rl.encoding import digest_state
from sarsa_rl.value_table import ValueTable, get_rewards, sarsa_equation, set_reward


class TestTableFunctions:
    """Tests for set_reward / get_rewards on a raw dict."""

    def test_fresh_table_returns_defaults(self):
        """Unknown pairs read as the default reward."""
        weights = {}
        for default in (0, -1, 3.5):
            assert get_rewards(weights, {"s": 1}, ["a", "b"], default) == {"a": default, "b": default}

    def test_read_does_not_create_entries(self):
        weights = {}
        get_rewards(weights, 1, ["a"], 0)
        assert weights == {}

    def test_write_then_read(self):
        weights = {}
        set_reward(weights, 5, "up", 1)
        assert get_rewards(weights, 5, ["up"], -100)["up"] == 1
        assert get_rewards(weights, 5, ["down"], -100)["down"] == -100

    def test_result_keeps_caller_order(self):
        """Labels come back in the requested order, duplicates once."""
        weights = {}
        set_reward(weights, "s", "b", 2)
        result = get_rewards(weights, "s", ["c", "b", "a", "b"], 0)
        assert list(result) == ["c", "b", "a"]

    def test_numeric_actions_use_string_labels(self):
        weights = {}
        set_reward(weights, "s", 1, 7)
        assert get_rewards(weights, "s", [1, 2], 0) == {"1": 7, "2": 0}

    def test_key_type_distinguishes_states(self):
        weights = {}
        set_reward(weights, {1: "a"}, "go", 5)
        assert get_rewards(weights, {"1": "a"}, ["go"], 0)["go"] == 0
        assert get_rewards(weights, {1: "a"}, ["go"], 0)["go"] == 5

    def test_integral_float_action_shares_label(self):
        weights = {}
        set_reward(weights, "s", 2.0, 4)
        assert get_rewards(weights, "s", [2], 0) == {"2": 4}

    def test_structured_state_key_order(self):
        """Writes and reads agree on states built in different orders."""
        weights = {}
        set_reward(weights, {"x": 1, "y": 2}, "a", 9)
        assert get_rewards(weights, {"y": 2, "x": 1}, ["a"], 0)["a"] == 9


class TestSarsaEquation:
    """Tests for the SARSA update rule."""

    def test_first_update(self):
        """(1 - a) * Q0 + a * (r + g * Q1) with unseen pairs at default."""
        weights = {}
        result = sarsa_equation(5, "up", 10, 6, "down", 0.9, 0.1, weights, -1)
        assert result == pytest.approx(0.1 * -1 + 0.9 * (10 + 0.1 * -1))
        assert result == pytest.approx(8.81)
        assert get_rewards(weights, 5, ["up"], -1)["up"] == result

    def test_sequence_of_updates(self):
        weights = {}
        sarsa_equation(5, "up", 10, 6, "down", 0.9, 0.1, weights, -1)
        second = sarsa_equation(6, "down", 10, 7, "down", 0.9, 0.1, weights, -1)
        assert second == pytest.approx(8.81)

        third = sarsa_equation(5, "up", 10, 6, "down", 0.9, 0.1, weights, -1)
        assert third == pytest.approx(0.1 * 8.81 + 0.9 * (10 + 0.1 * 8.81))
        assert third == pytest.approx(10.6739)

    def test_only_state0_action0_written(self):
        weights = {}
        sarsa_equation("a", 1, 1.0, "b", 2, 0.5, 0.5, weights, 0)
        assert get_rewards(weights, "b", [2], 123)["2"] == 123
        assert len(weights) == 1

    def test_no_clamping(self):
        """Out-of-range parameters are applied as given."""
        weights = {}
        result = sarsa_equation("s", "a", 1.0, "t", "b", 2.0, 1.5, weights, 1.0)
        assert result == pytest.approx((1 - 2.0) * 1.0 + 2.0 * (1.0 + 1.5 * 1.0))

    def test_self_transition(self):
        """Next pair equal to current pair reads the old value."""
        weights = {}
        set_reward(weights, "s", "a", 2.0)
        result = sarsa_equation("s", "a", 1.0, "s", "a", 0.5, 0.5, weights, 0)
        assert result == pytest.approx(0.5 * 2.0 + 0.5 * (1.0 + 0.5 * 2.0))


class TestValueTable:
    """Tests for the ValueTable wrapper."""

    def test_set_get_and_len(self):
        table = ValueTable()
        assert len(table) == 0
        table.set("s", "a", 1.0)
        table.set("s", "b", 2.0)
        table.set("t", "a", 3.0)
        assert len(table) == 3
        assert table.states() == 2
        assert table.get("s", ["a", "b", "c"], 0) == {"a": 1.0, "b": 2.0, "c": 0}

    def test_contains(self):
        table = ValueTable()
        table.set((1, 2), "up", 1.0)
        assert ((1, 2), "up") in table
        assert ([1, 2], "up") in table
        assert ((1, 2), "down") not in table
        assert "junk" not in table

    def test_update_writes(self):
        table = ValueTable()
        value = table.update(0, "a", 1.0, 1, "b", 0.5, 0.9, 0)
        assert value == pytest.approx(0.5)
        assert (0, "a") in table

    def test_copy_is_independent(self):
        table = ValueTable()
        table.set("s", "a", 1.0)
        copied = table.copy()
        copied.set("s", "a", 5.0)
        table.set("s", "b", 2.0)
        assert table.get("s", ["a"], 0)["a"] == 1.0
        assert copied.get("s", ["b"], 0)["b"] == 0

    def test_to_dict_is_a_copy(self):
        table = ValueTable()
        table.set("s", "a", 1.0)
        raw = table.to_dict()
        raw['"s"']["a"] = 99
        assert table.get("s", ["a"], 0)["a"] == 1.0

    def test_entries_and_clear(self):
        table = ValueTable()
        table.set("s", "a", 1.0)
        assert list(table.entries()) == [('"s"', "a", 1.0)]
        table.clear()
        assert len(table) == 0

    def test_custom_encoder(self):
        """Any hashable-key encoder can be plugged in."""
        table = ValueTable(encoder=digest_state)
        table.set({"x": 1}, "a", 4.0)
        assert table.get({"x": 1}, ["a"], 0)["a"] == 4.0
        assert all(len(key) == 64 for key in table.to_dict())
