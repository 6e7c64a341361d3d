# tests/connection/test_conditions.py
import pytest
from ...connection.conditions import Condition, ConditionAccumulator


class TestCondition:
    """Tests for Condition."""

    def test_to_sql_defaults_to_equality(self):
        """Test a condition renders with '=' and a placeholder."""
        assert Condition("name", "John").to_sql() == "name = ?"

    def test_to_sql_passes_comparison_verbatim(self):
        """Test comparison strings are emitted as given."""
        assert Condition("name", "%J%", "AND", "LIKE").to_sql() == "name LIKE ?"
        assert Condition("age", 3, "OR", "<>").to_sql() == "age <> ?"

    def test_condition_is_immutable(self):
        """Test conditions cannot be modified once created."""
        condition = Condition("age", 30)
        with pytest.raises(AttributeError):
            condition.value = 40

    def test_equality(self):
        """Test conditions compare by all their fields."""
        assert Condition("a", 1, "OR", ">") == Condition("a", 1, "OR", ">")
        assert Condition("a", 1) != Condition("a", 1, "OR")
        assert Condition("a", 1) != "a = ?"


class TestConditionAccumulator:
    """Tests for ConditionAccumulator rendering and lifecycle."""

    def test_render_empty(self):
        """Test an empty accumulator renders no clause and no params."""
        assert ConditionAccumulator().render() == ("", [])

    def test_add_condition_returns_accumulator(self):
        """Test add_condition supports chaining."""
        acc = ConditionAccumulator()
        assert acc.add_condition("a", 1) is acc

    def test_render_single_condition(self):
        """Test one condition renders with a leading ' WHERE '."""
        acc = ConditionAccumulator().add_condition("id", 7)
        assert acc.render() == (" WHERE id = ?", [7])

    def test_first_operator_is_never_emitted(self):
        """Test the join operator of the first condition is ignored."""
        acc = ConditionAccumulator().add_condition("id", 7, "OR")
        assert acc.render() == (" WHERE id = ?", [7])

    def test_operator_of_each_condition_joins_it_to_previous_text(self):
        """Test clause i is joined with the operator pushed at i, not at i-1."""
        acc = (
            ConditionAccumulator()
            .add_condition("a", 1, "OR")
            .add_condition("b", 2, "AND")
            .add_condition("c", 3, "OR", ">")
            .add_condition("d", "%x%", "AND", "LIKE")
        )
        clause, params = acc.render()
        assert clause == " WHERE a = ? AND b = ? OR c > ? AND d LIKE ?"
        assert params == [1, 2, 3, "%x%"]

    @pytest.mark.parametrize("count", [1, 2, 5, 12])
    def test_placeholders_match_conditions(self, count):
        """Test N conditions give N placeholders bound in push order."""
        acc = ConditionAccumulator()
        for i in range(count):
            acc.add_condition(f"c{i}", i, "OR" if i % 2 else "AND")
        clause, params = acc.render()
        assert clause.count("?") == count
        assert params == list(range(count))
        assert clause.startswith(" WHERE c0 = ?")

    def test_render_returns_fresh_params(self):
        """Test mutating rendered params does not affect the accumulator."""
        acc = ConditionAccumulator().add_condition("a", 1)
        _, params = acc.render()
        params.append(99)
        assert acc.render() == (" WHERE a = ?", [1])

    def test_reset_then_render(self):
        """Test reset clears everything."""
        acc = ConditionAccumulator().add_condition("a", 1).add_condition("b", 2)
        acc.reset()
        assert acc.render() == ("", [])
        assert len(acc) == 0

    def test_reset_is_idempotent(self):
        """Test reset can be called repeatedly."""
        acc = ConditionAccumulator()
        acc.reset()
        acc.reset()
        assert acc.render() == ("", [])

    def test_copy_is_independent(self):
        """Test a copy does not share state with the original."""
        acc = ConditionAccumulator().add_condition("a", 1)
        clone = acc.copy()
        clone.add_condition("b", 2)
        assert len(acc) == 1
        assert len(clone) == 2

    def test_consume_empties_accumulator_on_entry(self):
        """Test consume hands over the conditions and leaves the accumulator empty."""
        acc = ConditionAccumulator().add_condition("a", 1).add_condition("b", 2, "OR")
        with acc.consume() as detached:
            assert not acc
            assert detached.render() == (" WHERE a = ? OR b = ?", [1, 2])
        assert not detached

    def test_consume_resets_on_exception(self):
        """Test conditions are gone even when the block raises."""
        acc = ConditionAccumulator().add_condition("a", 1)
        with pytest.raises(RuntimeError):
            with acc.consume():
                raise RuntimeError("boom")
        assert acc.render() == ("", [])

    def test_conditions_added_during_consume_survive(self):
        """Test conditions added for the next query while one is running are kept."""
        acc = ConditionAccumulator().add_condition("a", 1)
        with acc.consume() as detached:
            acc.add_condition("next", 2)
            assert detached.render() == (" WHERE a = ?", [1])
        assert acc.render() == (" WHERE next = ?", [2])

    def test_conditions_property_preserves_order(self):
        """Test conditions are exposed in insertion order."""
        acc = ConditionAccumulator().add_condition("a", 1).add_condition("b", 2, "OR")
        assert [c.column for c in acc.conditions] == ["a", "b"]
        assert [c.join_operator for c in acc] == ["AND", "OR"]
