# tests/test_ordering.py
"""Motor de ordenação puro: nenhum teste aqui toca no banco"""

import pytest

from apps.board.ordering import (
    OrderDelta,
    Placement,
    coerce_order,
    dense_orders,
    plan_move,
)
from apps.core.exceptions import ValidationError


def column(container, *ids):
    """Itens de um container com ordens densas 0..n-1"""
    return [Placement(item_id, container, order) for order, item_id in enumerate(ids)]


def apply(plan, placements):
    """Aplica o plano e devolve {container: [ids em ordem]}"""
    new_orders = {delta.id: delta.new_order for delta in plan.deltas}
    result = {}
    for p in placements:
        if p.id == plan.moved_id:
            container, order = plan.target_container, plan.target_order
        else:
            container, order = p.container, new_orders.get(p.id, p.order)
        result.setdefault(container, []).append((order, p.id))
    return {c: [item_id for _, item_id in sorted(items)] for c, items in result.items()}


def orders(plan, placements):
    new_orders = {delta.id: delta.new_order for delta in plan.deltas}
    by_container = {}
    for p in placements:
        if p.id == plan.moved_id:
            by_container.setdefault(plan.target_container, []).append(plan.target_order)
        else:
            by_container.setdefault(p.container, []).append(new_orders.get(p.id, p.order))
    return {c: sorted(values) for c, values in by_container.items()}


# ============== coerce_order ==============

class TestCoerceOrder:

    @pytest.mark.parametrize('value, expected', [(0, 0), (3, 3), (2.0, 2)])
    def test_accepts_integral_numbers(self, value, expected):
        assert coerce_order(value) == expected

    @pytest.mark.parametrize('value', [-1, 1.5, '2', None, True, [1]])
    def test_rejects_invalid_values(self, value):
        with pytest.raises(ValidationError):
            coerce_order(value)

    def test_error_mentions_field(self):
        with pytest.raises(ValidationError) as exc:
            coerce_order('x', field='order')
        assert "'order'" in exc.value.message


def test_dense_orders_closes_gaps_and_breaks_ties_by_id():
    placements = [
        Placement(5, 'c', 7),
        Placement(2, 'c', 0),
        Placement(9, 'c', 3),
        Placement(4, 'c', 3),
    ]
    assert dense_orders(placements) == {2: 0, 4: 1, 9: 2, 5: 3}


# ============== Mesmo container ==============

class TestSameContainer:

    def test_move_down(self):
        items = column('A', 1, 2, 3, 4)
        plan = plan_move(items[0], 'A', 2, items)

        assert apply(plan, items) == {'A': [2, 3, 1, 4]}
        assert plan.deltas == [OrderDelta(2, 0), OrderDelta(3, 1)]
        assert plan.shifts_siblings
        assert not plan.is_cross_container

    def test_move_up(self):
        items = column('A', 1, 2, 3, 4)
        plan = plan_move(items[3], 'A', 1, items)

        assert apply(plan, items) == {'A': [1, 4, 2, 3]}
        assert plan.deltas == [OrderDelta(2, 2), OrderDelta(3, 3)]

    def test_move_to_last_position(self):
        items = column('A', 1, 2, 3)
        plan = plan_move(items[0], 'A', 2, items)

        assert apply(plan, items) == {'A': [2, 3, 1]}

    def test_same_position_is_noop(self):
        items = column('A', 1, 2, 3)
        plan = plan_move(items[1], 'A', 1, items)

        assert plan.is_noop
        assert plan.deltas == []
        assert not plan.shifts_siblings

    def test_result_is_dense(self):
        items = column('A', 1, 2, 3, 4, 5)
        for moved in items:
            for target in range(len(items)):
                plan = plan_move(moved, 'A', target, items)
                assert orders(plan, items) == {'A': [0, 1, 2, 3, 4]}

    def test_repeating_the_move_is_noop(self):
        items = column('A', 1, 2, 3, 4)
        plan = plan_move(items[0], 'A', 3, items)

        new_orders = {d.id: d.new_order for d in plan.deltas}
        after = [
            Placement(p.id, 'A', plan.target_order if p.id == 1 else new_orders.get(p.id, p.order))
            for p in items
        ]
        moved = next(p for p in after if p.id == 1)

        assert plan_move(moved, 'A', 3, after).is_noop

    def test_index_past_the_end_is_rejected(self):
        items = column('A', 1, 2, 3)
        with pytest.raises(ValidationError):
            plan_move(items[0], 'A', 3, items)

    def test_negative_index_is_rejected(self):
        items = column('A', 1, 2, 3)
        with pytest.raises(ValidationError):
            plan_move(items[0], 'A', -1, items)

    def test_gaps_are_compacted(self):
        items = [Placement(1, 'A', 0), Placement(2, 'A', 4), Placement(3, 'A', 9)]
        plan = plan_move(items[2], 'A', 0, items)

        assert apply(plan, items) == {'A': [3, 1, 2]}
        assert orders(plan, items) == {'A': [0, 1, 2]}

    def test_items_of_other_containers_are_ignored(self):
        items = column('A', 1, 2) + column('B', 3, 4)
        plan = plan_move(items[0], 'A', 1, items)

        assert {d.id for d in plan.deltas} == {2}


# ============== Entre containers ==============

class TestCrossContainer:

    def test_zero_to_two_scenario(self):
        """A=[a0,a1,a2], B=[b0,b1,b2]; a0 vai para B na posição 2"""
        source = column('A', 'a0', 'a1', 'a2')
        target = column('B', 'b0', 'b1', 'b2')
        items = source + target

        plan = plan_move(source[0], 'B', 2, items)

        assert apply(plan, items) == {'A': ['a1', 'a2'], 'B': ['b0', 'b1', 'a0', 'b2']}
        assert orders(plan, items) == {'A': [0, 1], 'B': [0, 1, 2, 3]}
        assert plan.is_cross_container
        assert plan.shifts_siblings

    def test_append_to_end_of_target(self):
        items = column('A', 1, 2) + column('B', 3, 4)
        plan = plan_move(items[1], 'B', 2, items)

        assert apply(plan, items) == {'A': [1], 'B': [3, 4, 2]}
        # Último de A indo para o fim de B: ninguém mais muda
        assert plan.deltas == []
        assert not plan.shifts_siblings

    def test_move_into_empty_container(self):
        items = column('A', 1, 2, 3)
        plan = plan_move(items[0], 'B', 0, items)

        assert apply(plan, items) == {'A': [2, 3], 'B': [1]}
        assert plan.deltas == [OrderDelta(2, 0), OrderDelta(3, 1)]

    def test_conserves_item_count(self):
        source = column('A', 1, 2, 3, 4)
        target = column('B', 5, 6, 7)
        items = source + target

        for moved in source:
            for position in range(len(target) + 1):
                plan = plan_move(moved, 'B', position, items)
                result = apply(plan, items)
                assert len(result['A']) == 3
                assert len(result['B']) == 4
                assert orders(plan, items) == {'A': [0, 1, 2], 'B': [0, 1, 2, 3]}

    def test_index_above_target_size_is_rejected(self):
        items = column('A', 1) + column('B', 2, 3)
        with pytest.raises(ValidationError):
            plan_move(items[0], 'B', 3, items)

    def test_invalid_index_is_rejected_before_planning(self):
        items = column('A', 1) + column('B', 2)
        with pytest.raises(ValidationError):
            plan_move(items[0], 'B', 0.5, items)
