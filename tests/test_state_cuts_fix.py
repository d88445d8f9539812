"""Tests for cut right-hand-side and fixing diffs."""
from itertools import permutations

import pytest

from matheuristics import EqualTo, GreaterThan, LessThan, Model
from matheuristics.state import (
    CutRhsChange,
    CutRhsChangeDiff,
    CutsTracker,
    DomainChangeDiff,
    DomainChangeTracker,
    FixChange,
    FixVarChangeDiff,
    FixVarChangeTracker,
    ModelState,
    UnfixChange,
    apply_change,
    merge_forward,
    recover_state,
)

INACTIVE = -1e5


@pytest.fixture
def cuts_model():
    model = Model("cuts")
    x = model.add_variable("x", lower=0.0)
    y = model.add_variable("y", lower=0.0)
    z = model.add_variable("z", lower=0.0)
    model.set_objective({x: 1.0, y: 1.0, z: 1.0})
    rows = [
        model.add_linear_constraint(coefs, ">=", INACTIVE)
        for coefs in (
            {x: 3.0, y: 3.0, z: 2.0},
            {x: 2.0, y: 2.0, z: 2.0},
            {x: 1.0, y: 2.0, z: 2.0},
            {x: 4.0, y: 3.0, z: 4.0},
        )
    ]
    return model, rows


class TestCutRhs:
    """
    Tree and active cuts (rhs 1 unless noted, other rows inactive):

        1        -
        2 (of 1) c1
        3 (of 2) c1, c2, c3
        4 (of 1) c1 with rhs 2, c4
    """

    EXPECTED = [
        [INACTIVE, INACTIVE, INACTIVE, INACTIVE],
        [1.0, INACTIVE, INACTIVE, INACTIVE],
        [1.0, 1.0, 1.0, INACTIVE],
        [2.0, INACTIVE, INACTIVE, 1.0],
    ]

    @staticmethod
    def activate(state, rhs):
        return state.child(
            CutRhsChangeDiff.from_rhs(rhs),
            CutRhsChangeDiff.from_rhs({row: INACTIVE for row in rhs}),
        )

    def build(self, cuts_model):
        model, (c1, c2, c3, c4) = cuts_model
        tracker = CutsTracker()
        helper = tracker.transform_model(model)
        state1 = tracker.root_state(model)
        state2 = self.activate(state1, {c1: 1.0})
        state3 = self.activate(state2, {c2: 1.0, c3: 1.0})
        state4 = self.activate(state1, {c1: 2.0, c4: 1.0})
        return model, [c1, c2, c3, c4], helper, [state1, state2, state3, state4]

    def test_all_permutations(self, cuts_model):
        model, rows, helper, states = self.build(cuts_model)
        prev_state = states[0]

        for order in permutations(range(4)):
            for node in order:
                recover_state(model, prev_state, states[node], helper)
                assert [model.rhs(row) for row in rows] == self.EXPECTED[node]
                prev_state = states[node]

    def test_symmetry(self, cuts_model):
        model, rows, helper, states = self.build(cuts_model)
        before = model.snapshot()

        for a, b in permutations(states, 2):
            recover_state(model, states[0], a, helper)
            recover_state(model, a, b, helper)
            recover_state(model, b, states[0], helper)
            assert model.snapshot() == before

    def test_change_keyed_by_row(self, cuts_model):
        model, (c1, *_) = cuts_model
        diff = CutRhsChangeDiff.from_changes([CutRhsChange(c1, 1.0), CutRhsChange(c1, 3.0)])

        assert len(diff) == 1
        assert diff.cut_rhs[c1].rhs == 3.0

    def test_tightened_cut_changes_lp(self, cuts_model):
        model, rows, helper, states = self.build(cuts_model)

        model.optimize()
        assert model.objective_value == pytest.approx(0.0)

        recover_state(model, states[0], states[2], helper)
        model.optimize()
        assert model.objective_value == pytest.approx(0.5)


class TestFixVar:
    """
    Nodes (x in [0, 10] and y in [-5, 5] at the root):

        1        -
        2 (of 1) x == 3
        3 (of 2) x == 3, y == 1
        4 (of 1) y == -2
    """

    def build(self):
        model = Model("fix")
        x = model.add_variable("x", lower=0.0, upper=10.0)
        y = model.add_variable("y", lower=-5.0, upper=5.0)
        tracker = FixVarChangeTracker()
        helper = tracker.transform_model(model)

        def fix(state, var, value):
            return state.child(
                FixVarChangeDiff.from_changes([FixChange(var, value)]),
                FixVarChangeDiff.from_changes(
                    [UnfixChange(var, model.lower_bound(var), model.upper_bound(var))]
                ),
            )

        state1 = tracker.root_state(model)
        state2 = fix(state1, x, 3.0)
        state3 = fix(state2, y, 1.0)
        state4 = fix(state1, y, -2.0)
        return model, x, y, helper, [state1, state2, state3, state4]

    EXPECTED = [
        (None, None),
        (3.0, None),
        (3.0, 1.0),
        (None, -2.0),
    ]

    def check(self, model, x, y, node):
        x_fix, y_fix = self.EXPECTED[node]
        for var, value, bounds in ((x, x_fix, (0.0, 10.0)), (y, y_fix, (-5.0, 5.0))):
            if value is None:
                assert not model.is_fixed(var)
                assert (model.lower_bound(var), model.upper_bound(var)) == bounds
            else:
                assert model.fix_value(var) == value
                assert not model.has_lower_bound(var)
                assert not model.has_upper_bound(var)

    def test_all_permutations(self):
        model, x, y, helper, states = self.build()
        prev_state = states[0]

        for order in permutations(range(4)):
            for node in order:
                recover_state(model, prev_state, states[node], helper)
                self.check(model, x, y, node)
                prev_state = states[node]

    def test_round_trip_restores_snapshot(self):
        model, x, y, helper, states = self.build()
        before = model.snapshot()

        recover_state(model, states[0], states[2], helper)
        assert model.snapshot() != before
        recover_state(model, states[2], states[0], helper)

        assert model.snapshot() == before

    def test_double_fix_raises(self):
        model = Model()
        x = model.add_variable(lower=0.0, upper=1.0)
        helper = FixVarChangeTracker().transform_model(model)
        apply_change(model, FixChange(x, 1.0), helper)

        with pytest.raises(RuntimeError, match="already fixed"):
            apply_change(model, FixChange(x, 0.0), helper)

    def test_unfix_of_free_variable_is_noop(self):
        model = Model()
        x = model.add_variable(lower=0.0, upper=1.0)
        helper = FixVarChangeTracker().transform_model(model)
        before = model.snapshot()

        apply_change(model, UnfixChange(x, -3.0, 3.0), helper)

        assert model.snapshot() == before

    def test_latest_change_of_a_variable_wins(self):
        model = Model()
        x = model.add_variable(lower=0.0, upper=1.0)
        helper = FixVarChangeTracker().transform_model(model)
        diff = FixVarChangeDiff.from_changes([FixChange(x, 1.0), UnfixChange(x, 0.0, 1.0)])

        assert len(diff) == 1
        assert isinstance(diff.changes_by_var[x], UnfixChange)

        apply_change(model, diff, helper)

        assert not model.is_fixed(x)
        assert model.lower_bound(x) == 0.0

    def test_merge_replaces_unfix_by_later_fix(self):
        model = Model()
        x = model.add_variable(lower=0.0, upper=1.0)

        merged = merge_forward(
            FixVarChangeDiff.from_changes([UnfixChange(x, 0.0, 1.0)]),
            FixVarChangeDiff.from_changes([FixChange(x, 0.0)]),
        )

        assert list(merged.changes()) == [FixChange(x, 0.0)]


class TestFixUnfixRefix:
    """
    Nodes (x in [0, 10] at the root):

        1        -
        2 (of 1) x == 3
        3 (of 2) x unfixed again
        4 (of 3) x == 5
        5 (of 1) x == 7
    """

    EXPECTED = [None, 3.0, None, 5.0, 7.0]

    def build(self):
        model = Model("refix")
        x = model.add_variable("x", lower=0.0, upper=10.0)
        tracker = FixVarChangeTracker()
        helper = tracker.transform_model(model)
        unfix = UnfixChange(x, 0.0, 10.0)

        def fix(state, value):
            return state.child(
                FixVarChangeDiff.from_changes([FixChange(x, value)]),
                FixVarChangeDiff.from_changes([unfix]),
            )

        state1 = tracker.root_state(model)
        state2 = fix(state1, 3.0)
        state3 = state2.child(
            FixVarChangeDiff.from_changes([unfix]),
            FixVarChangeDiff.from_changes([FixChange(x, 3.0)]),
        )
        state4 = fix(state3, 5.0)
        state5 = fix(state1, 7.0)
        return model, x, helper, [state1, state2, state3, state4, state5]

    def check(self, model, x, node):
        value = self.EXPECTED[node]
        if value is None:
            assert not model.is_fixed(x)
            assert (model.lower_bound(x), model.upper_bound(x)) == (0.0, 10.0)
        else:
            assert model.is_fixed(x)
            assert model.fix_value(x) == value

    def test_diffs_keep_one_entry(self):
        model, x, helper, states = self.build()
        refixed = states[3]

        assert list(refixed.forward["fix"].changes()) == [FixChange(x, 5.0)]
        assert list(refixed.backward["fix"].changes()) == [UnfixChange(x, 0.0, 10.0)]

    def test_all_permutations(self):
        model, x, helper, states = self.build()
        before = model.snapshot()
        prev_state = states[0]

        for order in permutations(range(len(states))):
            for node in order:
                recover_state(model, prev_state, states[node], helper)
                self.check(model, x, node)
                prev_state = states[node]

        recover_state(model, prev_state, states[0], helper)
        assert model.snapshot() == before


class TestCutRhsSense:
    @pytest.mark.parametrize(
        "sense, set_type",
        [(">=", GreaterThan), ("<=", LessThan), ("==", EqualTo)],
    )
    def test_row_keeps_its_sense(self, sense, set_type):
        model = Model()
        x = model.add_variable(lower=0.0, upper=10.0)
        row = model.add_linear_constraint({x: 1.0}, sense, 6.0)
        helper = CutsTracker().transform_model(model)

        apply_change(model, CutRhsChange(row, 4.0), helper)

        assert model.get_constraint_set(row) == set_type(4.0)
        assert model.rhs(row) == 4.0

    def test_le_row_round_trip(self):
        model = Model()
        x = model.add_variable(lower=0.0)
        row = model.add_linear_constraint({x: 1.0}, "<=", 8.0)
        model.set_objective({x: 1.0}, "max")
        tracker = CutsTracker()
        helper = tracker.transform_model(model)
        root = tracker.root_state(model)
        child = root.child(CutRhsChangeDiff.from_rhs({row: 2.0}), CutRhsChangeDiff.from_rhs({row: 8.0}))
        before = model.snapshot()

        recover_state(model, root, child, helper)
        model.optimize()
        assert model.objective_value == pytest.approx(2.0)

        recover_state(model, child, root, helper)
        assert model.snapshot() == before


class TestCombinedState:
    def test_combine_and_recover(self):
        model = Model()
        x = model.add_variable(lower=0.0, upper=10.0)
        y = model.add_variable(lower=0.0, upper=10.0)
        row = model.add_linear_constraint({x: 1.0, y: 1.0}, ">=", INACTIVE)
        helper = DomainChangeTracker().transform_model(model)

        root = DomainChangeTracker().root_state(model).combine(CutsTracker().root_state(model))
        child = root.child(
            [DomainChangeDiff.from_bounds(upper={x: 4.0}), CutRhsChangeDiff.from_rhs({row: 2.0})],
            [DomainChangeDiff.from_bounds(upper={x: 10.0}), CutRhsChangeDiff.from_rhs({row: INACTIVE})],
        )
        before = model.snapshot()

        recover_state(model, root, child, helper)
        assert model.upper_bound(x) == 4.0
        assert model.rhs(row) == 2.0

        recover_state(model, child, root, helper)
        assert model.snapshot() == before

    def test_combine_overlapping_kinds_raises(self):
        model = Model()
        state = DomainChangeTracker().root_state(model)

        with pytest.raises(ValueError, match="domain"):
            state.combine(DomainChangeTracker().root_state(model))

    def test_child_adds_new_kinds(self):
        model = Model()
        x = model.add_variable(lower=0.0)
        state = DomainChangeTracker().root_state(model)

        child = state.child(
            FixVarChangeDiff.from_changes([FixChange(x, 1.0)]),
            FixVarChangeDiff.from_changes([UnfixChange(x, 0.0, 5.0)]),
        )

        assert child.kinds == {"domain", "fix"}
        assert "fix" not in state.kinds

    def test_kind_order(self):
        model = Model()
        x = model.add_variable(lower=0.0)
        row = model.add_linear_constraint({x: 1.0}, ">=", 0.0)
        state = ModelState(
            [CutRhsChangeDiff.from_rhs({row: 1.0}), DomainChangeDiff.from_bounds(lower={x: 1.0})],
            [CutRhsChangeDiff.from_rhs({row: 0.0}), DomainChangeDiff.from_bounds(lower={x: 0.0})],
        )

        assert [d.kind for d in state.forward_diffs()] == ["domain", "cut_rhs"]
        assert [d.kind for d in state.backward_diffs()] == ["cut_rhs", "domain"]

    def test_duplicate_kind_rejected(self):
        with pytest.raises(ValueError, match="More than one"):
            ModelState([DomainChangeDiff(), DomainChangeDiff()], [])

    def test_merge_across_kinds_raises(self):
        with pytest.raises(TypeError, match="Cannot merge"):
            merge_forward(DomainChangeDiff(), CutRhsChangeDiff())
