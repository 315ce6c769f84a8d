"""
ToolboxOracle tests (roboticstoolbox DHRobot backend)
"""

import numpy as np
import pytest
import roboticstoolbox as rtb

from payload_estimation.chain_model import ChainModel
from payload_estimation.estimator import PayloadEstimator
from payload_estimation.oracle import ToolboxOracle


def single_link_robot():
    # 1 m link, 2 kg at its middle, turning about the base z axis
    return rtb.DHRobot([rtb.RevoluteDH(a=1.0, m=2.0, r=[-0.5, 0.0, 0.0])], name='single_link')


class RecordingRobot:
    n = 2

    def __init__(self):
        self.calls = []

    def rne(self, q, qd, qdd, gravity=None, fext=None):
        self.calls.append({'gravity': gravity, 'fext': np.array(fext)})
        return np.array([[1.0, 2.0]])


def test_gravity_torque_of_horizontal_link():
    oracle = ToolboxOracle(single_link_robot(), gravity=(0.0, -9.81, 0.0))

    tau = oracle.solve(np.zeros(1), np.zeros(1), np.zeros(1), np.zeros((1, 6)))

    assert tau.shape == (1,)
    assert tau[0] == pytest.approx(2.0 * 9.81 * 0.5, rel=1e-6)


def test_gravity_torque_of_vertical_link():
    oracle = ToolboxOracle(single_link_robot(), gravity=(0.0, -9.81, 0.0))

    tau = oracle.solve(np.array([np.pi / 2]), np.zeros(1), np.zeros(1), np.zeros((1, 6)))

    assert tau[0] == pytest.approx(0.0, abs=1e-9)


def test_terminal_wrench_is_passed_as_end_effector_load():
    robot = RecordingRobot()
    oracle = ToolboxOracle(robot)
    wrenches = np.zeros((2, 6))
    wrenches[1, 2] = 1.0

    tau = oracle.solve(np.zeros(2), np.zeros(2), np.zeros(2), wrenches)

    np.testing.assert_array_equal(tau, [1.0, 2.0])
    np.testing.assert_array_equal(robot.calls[0]['fext'], [0.0, 0.0, -1.0, 0.0, 0.0, 0.0])
    assert robot.calls[0]['gravity'] == [0.0, 0.0, -9.81]


def test_wrench_on_inner_joint_is_rejected():
    robot = RecordingRobot()
    oracle = ToolboxOracle(robot)
    wrenches = np.zeros((2, 6))
    wrenches[0, 0] = 1.0

    with pytest.raises(ValueError):
        oracle.solve(np.zeros(2), np.zeros(2), np.zeros(2), wrenches)
    assert robot.calls == []


def test_estimator_over_toolbox_oracle():
    robot = RecordingRobot()
    estimator = PayloadEstimator(ChainModel.from_limits([10.0, 10.0]), ToolboxOracle(robot))

    tau = estimator.get_torques([0.0, 0.0], [0.0, 0.0], [0.0, 0.0])

    np.testing.assert_array_equal(tau, [1.0, 2.0])
