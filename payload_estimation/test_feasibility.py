"""
FeasibilityChecker and report tests
"""

import numpy as np
import pytest

from payload_estimation.chain_model import ChainModel
from payload_estimation.errors import DimensionError
from payload_estimation.estimator import PayloadEstimate
from payload_estimation.feasibility import FeasibilityChecker, FeasibilityStatus, print_payload_report


def make_chain():
    return ChainModel.from_limits([10.0, 5.0], joint_names=['shoulder', 'elbow'], group_name='arm')


def test_feasible_torques():
    checker = FeasibilityChecker(make_chain())

    result = checker.check_torque_feasibility([-8.0, 2.5])

    assert result['feasible']
    assert result['status'] == FeasibilityStatus.FEASIBLE
    assert result['exceeded_joints'] == []
    np.testing.assert_allclose(result['ratios'], [0.8, 0.5])
    assert result['max_ratio'] == pytest.approx(0.8)


def test_infeasible_torques_with_safety_margin():
    checker = FeasibilityChecker(make_chain(), safety_margin=0.5)

    result = checker.check_torque_feasibility([4.0, -3.0])

    assert not result['feasible']
    assert result['status'] == FeasibilityStatus.INFEASIBLE_TORQUE
    assert result['exceeded_joints'] == [1]
    assert result['max_ratio'] == pytest.approx(1.2)


def test_trajectory_uses_peak_torque_per_joint():
    checker = FeasibilityChecker(make_chain())
    tau_traj = np.array([
        [1.0, 1.0],
        [-12.0, 2.0],
        [3.0, -4.0],
    ])

    result = checker.check_torque_feasibility(tau_traj)

    np.testing.assert_allclose(result['tau_required'], [12.0, 4.0])
    assert result['exceeded_joints'] == [0]


def test_required_scale_factor():
    checker = FeasibilityChecker(make_chain())

    assert checker.get_required_scale_factor([5.0, 1.0]) == 1.0
    assert checker.get_required_scale_factor([20.0, 1.0]) == pytest.approx(0.5)


def test_zero_limit_joint():
    chain = ChainModel.from_limits([0.0, 5.0])
    checker = FeasibilityChecker(chain)

    assert checker.check_torque_feasibility([0.0, 1.0])['feasible']
    assert not checker.check_torque_feasibility([0.1, 1.0])['feasible']


def test_wrong_length():
    checker = FeasibilityChecker(make_chain())

    with pytest.raises(DimensionError):
        checker.check_torque_feasibility([1.0, 2.0, 3.0])


def test_reports(capsys):
    chain = make_chain()
    checker = FeasibilityChecker(chain)
    checker.print_feasibility_report(checker.check_torque_feasibility([12.0, 1.0]))

    estimate = PayloadEstimate(3.5, 1, np.array([4.0, 3.5]), 'min')
    print_payload_report(estimate, chain, zero_torques=np.array([2.0, 3.0]))

    out = capsys.readouterr().out
    assert 'EXCEEDED' in out
    assert 'Saturated joint: elbow (1)' in out
    assert 'Payload: 3.500 N' in out


def test_payload_report_marks_unloaded_joints(capsys):
    estimate = PayloadEstimate(4.0, None, np.array([4.0, np.nan]), 'max')

    print_payload_report(estimate, make_chain())

    out = capsys.readouterr().out
    assert 'not loaded' in out
    assert 'Saturated joint' not in out
