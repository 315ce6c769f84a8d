"""
Robot description and chain initialization tests
"""

from pathlib import Path

import numpy as np
import pytest
import roboticstoolbox as rtb

from payload_estimation.chain_model import ChainModel, load_chain
from payload_estimation.description import RobotDescription
from payload_estimation.errors import ConfigurationError, TopologyError

DATA_DIR = Path(__file__).parent / 'data'
URDF_PATH = DATA_DIR / 'two_link_arm.urdf'
SRDF_PATH = DATA_DIR / 'two_link_arm.srdf'


def load_description():
    return RobotDescription.from_file(URDF_PATH, SRDF_PATH)


# --- URDF/SRDF parsing ---

def test_parse_links_and_joints():
    description = load_description()

    assert description.name == 'two_link_arm'
    assert set(description.joints) == {
        'world_joint', 'shoulder', 'elbow', 'flange', 'finger_left_joint', 'finger_right_joint'
    }
    shoulder = description.joints['shoulder']
    assert shoulder.parent == 'base_link'
    assert shoulder.child == 'link1'
    assert shoulder.effort == 40.0
    assert shoulder.axis == (0.0, 1.0, 0.0)

    link1 = description.links['link1']
    assert link1.mass == 2.0


def test_link_without_inertial_is_massless():
    description = load_description()

    assert description.links['tool0'].mass == 0.0


def test_dynamics_model_covers_every_movable_joint():
    description = load_description()

    assert isinstance(description.robot, rtb.Robot)
    assert description.robot.n == 4
    assert description.robot.link_dict['link1'].tlim == 40.0
    assert description.robot.link_dict['link1'].m == 2.0


def test_parse_groups():
    description = load_description()

    assert description.has_group('arm')
    assert description.groups['arm'].chains == [('base_link', 'tool0')]
    assert description.groups['arm_joints'].joints == ['shoulder', 'elbow']
    assert description.groups['arm_and_hand'].subgroups == ['arm', 'hand']


def test_group_joint_names_expands_chains_links_and_subgroups():
    description = load_description()

    assert description.group_joint_names('arm') == ['shoulder', 'elbow', 'flange']
    assert description.group_joint_names('arm_links') == ['shoulder', 'elbow']
    assert description.group_joint_names('arm_and_hand') == [
        'shoulder', 'elbow', 'flange', 'finger_left_joint', 'finger_right_joint'
    ]


def test_path_between():
    description = load_description()

    path = description.path_between('world', 'link2')

    assert [joint.name for joint in path] == ['world_joint', 'shoulder', 'elbow']
    assert description.path_between('link2', 'world') is None
    assert description.path_between('link1', 'link1') == []


def test_malformed_urdf():
    with pytest.raises(ConfigurationError):
        RobotDescription.from_string('<robot name="broken"><link name="a"></robot>')


def test_missing_urdf_file(tmp_path):
    with pytest.raises(ConfigurationError):
        RobotDescription.from_file(tmp_path / 'missing.urdf')


def test_joint_with_unknown_link():
    urdf = """
    <robot name="r">
      <link name="a"/>
      <joint name="j" type="revolute">
        <parent link="a"/><child link="b"/>
        <limit effort="1" velocity="1"/>
      </joint>
    </robot>
    """
    with pytest.raises(ConfigurationError):
        RobotDescription.from_string(urdf)


def test_self_including_group():
    description = load_description()
    description.load_groups('<robot name="r"><group name="loop"><group name="loop"/></group></robot>')

    with pytest.raises(ConfigurationError):
        description.group_joint_names('loop')


# --- chain initialization ---

def test_chain_from_chain_group():
    chain = ChainModel.from_description(load_description(), 'arm')

    assert chain.base_link == 'base_link'
    assert chain.tip_link == 'tool0'
    assert chain.joint_names == ('shoulder', 'elbow')
    assert chain.dof == 2
    np.testing.assert_array_equal(chain.torque_limits, [40.0, 10.0])
    assert chain.robot is not None
    assert chain.joint_indices == (0, 1)
    assert chain.torque_columns == (0, 1)


def test_chain_wrench_slots_follow_rigid_bodies():
    chain = ChainModel.from_description(load_description(), 'arm')

    # joint 0 loads link1, joint 1 loads the flange link at the tip
    assert chain.wrench_links == ('link1', 'tool0')


def test_chain_from_joint_list_ends_at_last_link():
    chain = ChainModel.from_description(load_description(), 'arm_joints')

    assert chain.base_link == 'base_link'
    assert chain.tip_link == 'link2'
    assert chain.dof == 2


def test_chain_is_immutable():
    chain = ChainModel.from_description(load_description(), 'arm')

    with pytest.raises(ValueError):
        chain.torque_limits[0] = 1.0
    with pytest.raises(AttributeError):
        chain.group_name = 'other'


def test_missing_group():
    with pytest.raises(ConfigurationError):
        ChainModel.from_description(load_description(), 'legs')


@pytest.mark.parametrize('group', ['hand', 'arm_and_hand'])
def test_branching_group_is_not_a_chain(group):
    with pytest.raises(TopologyError):
        ChainModel.from_description(load_description(), group)


def test_disconnected_group_is_not_a_chain():
    description = load_description()
    description.load_groups(
        '<robot name="r"><group name="gap">'
        '<joint name="shoulder"/><joint name="flange"/>'
        '</group></robot>'
    )

    with pytest.raises(TopologyError):
        ChainModel.from_description(description, 'gap')


def test_group_without_movable_joints():
    with pytest.raises(ConfigurationError):
        ChainModel.from_description(load_description(), 'flange_only')


def test_movable_joint_without_effort_limit():
    urdf = """
    <robot name="r">
      <link name="a"/><link name="b"/>
      <joint name="j" type="continuous">
        <parent link="a"/><child link="b"/>
      </joint>
    </robot>
    """
    description = RobotDescription.from_string(urdf)
    description.add_chain_group('arm', 'a', 'b')

    with pytest.raises(ConfigurationError):
        ChainModel.from_description(description, 'arm')


def test_floating_joint_is_not_supported():
    urdf = """
    <robot name="r">
      <link name="a"/><link name="b"/>
      <joint name="j" type="floating">
        <parent link="a"/><child link="b"/>
      </joint>
    </robot>
    """
    description = RobotDescription.from_string(urdf)
    description.add_chain_group('free', 'a', 'b')

    with pytest.raises(ConfigurationError):
        ChainModel.from_description(description, 'free')


def test_load_chain_with_explicit_links():
    chain = load_chain(URDF_PATH, 'reach', base_link='world', tip_link='tool0')

    assert chain.base_link == 'world'
    assert chain.joint_names == ('shoulder', 'elbow')


def test_from_limits_rejects_negative_limits():
    with pytest.raises(ConfigurationError):
        ChainModel.from_limits([10.0, -1.0])


def test_joint_axis_off_the_coordinate_axes_is_rejected():
    urdf = """
    <robot name="r">
      <link name="a"/><link name="b"/>
      <joint name="j" type="revolute">
        <parent link="a"/><child link="b"/>
        <axis xyz="0 1 1"/>
        <limit effort="1" velocity="1"/>
      </joint>
    </robot>
    """
    description = RobotDescription.from_string(urdf)
    description.add_chain_group('tilted', 'a', 'b')

    with pytest.raises(ConfigurationError):
        ChainModel.from_description(description, 'tilted')
