import numpy as np
import pytest
from cubic_life.config import InsertionWindows, RuleWeights
from cubic_life.rules import bias_terms, rule_thresholds, resolve_next_state, resolve_cell

W = InsertionWindows(PROTECTED_WINDOW=500.0, MEMORY_WINDOW=1000.0)
SETTLED = np.inf

def test_bias_terms_symmetric_and_clamped():
    assert bias_terms(0.5) == (0.0, 0.0)
    assert bias_terms(0.0) == (0.0, 0.0)     # no extra harshness below neutral
    sb, bb = bias_terms(0.59)
    assert sb == bb == pytest.approx(0.072)
    sb, _ = bias_terms(1.0)
    assert sb == pytest.approx(0.4)
    sb, _ = bias_terms(10.0)
    assert sb == pytest.approx(0.9)

def test_thresholds_table():
    th = rule_thresholds([1, 1, 1, 1, 0, 0, 0], [4, 3, 5, 0, 4, 3, 5], 0.0, 0.0)
    assert np.allclose(th[:6], [0.1, 0.4, 0.4, 0.99, 0.7, 0.95])
    assert th[6] == np.inf

def test_birth_uses_half_bias_for_three():
    th = rule_thresholds([0, 0], [4, 3], 0.2, 0.2)
    assert np.allclose(th, [0.5, 0.85])

def test_protected_is_forced_alive():
    # Zero neighbours and draws that would kill under the base rule
    assert resolve_cell(1, 0, 0.5, 0.0, [0.0, 0.0, 0.0], W) == 1
    assert resolve_cell(0, 0, 0.5, 499.0, [0.0, 0.0, 0.0], W) == 1

def test_transition_hold_and_fallback():
    # progress 0.5 → hold iff transition draw > 0.4
    assert resolve_cell(1, 0, 0.5, 750.0, [0.41, 0.0, 0.99], W) == 1
    # hold fails → base rule with 0 neighbours: survive iff draw > 0.99
    assert resolve_cell(1, 0, 0.5, 750.0, [0.39, 0.5, 0.99], W) == 0
    assert resolve_cell(1, 0, 0.5, 750.0, [0.39, 0.995, 0.99], W) == 1

def test_no_attrition_inside_memory_window():
    assert resolve_cell(1, 4, 0.5, 750.0, [0.0, 0.5, 0.999], W) == 1

def test_attrition_for_settled_cells():
    # base survives (0.5 > 0.1), attrition draw > 0.95 kills
    assert resolve_cell(1, 4, 0.5, SETTLED, [0.0, 0.5, 0.96], W) == 0
    assert resolve_cell(1, 4, 0.5, SETTLED, [0.0, 0.5, 0.94], W) == 1
    # survival bias 0.2 raises the attrition bar to 1.15: never kills
    assert resolve_cell(1, 4, 0.75, SETTLED, [0.0, 0.5, 0.999], W) == 1

def test_no_birth_outside_three_or_four():
    for n in [0, 1, 2, 5, 6, 26]:
        assert resolve_cell(0, n, 1.0, SETTLED, [0.0, 0.999, 0.0], W) == 0

def test_vectorised_shapes():
    draws = np.full((4, 3), 0.5)
    out = resolve_next_state([1, 1, 0, 0], [4, 0, 4, 0], 0.5, [SETTLED] * 4, draws, W)
    assert out.dtype == bool
    assert out.tolist() == [True, False, False, False]

def test_draws_must_have_three_columns():
    with pytest.raises(ValueError):
        resolve_next_state([1], [4], 0.5, [SETTLED], np.zeros((1, 2)), W)

def test_isolated_survival_rate_after_memory():
    rng = np.random.default_rng(2024)
    trials = 20000
    bias = 0.59
    sb, _ = bias_terms(bias)
    out = resolve_next_state(
        np.ones(trials, bool), np.zeros(trials, int), bias,
        np.full(trials, 1000.0), rng.random((trials, 3)), W
    )
    assert out.mean() <= 0.01 + sb + 0.01

def test_custom_weights():
    w = RuleWeights(SURVIVE_STABLE=0.0, ATTRITION_THRESHOLD=1.0)
    assert resolve_cell(1, 4, 0.5, SETTLED, [0.0, 0.001, 0.999], W, w) == 1
