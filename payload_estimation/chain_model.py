"""
Chain Model - immutable joint chain produced by initialization

Holds everything fixed for the lifetime of an estimator:
- group name, base link, tip link
- ordered movable joint names (N = dof)
- per-joint torque limits (τ_max, symmetric)
- the roboticstoolbox Robot of the whole URDF, with where each chain joint
  sits in it and which link each joint's external wrench acts on
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import numpy as np

from .description import SUPPORTED_JOINT_TYPES
from .errors import ConfigurationError, TopologyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ChainModel:
    """
    Serial chain between a base link and a tip link.

    Created once by from_description() (or from_limits() for an abstract
    chain used with an external oracle) and never modified afterwards.

    Attributes:
        robot: roboticstoolbox Robot of the whole URDF (None for abstract chains)
        joint_indices: robot.q index of each chain joint
        torque_columns: robot.rne() output position of each chain joint
        wrench_links: link loaded by each joint's external wrench, the last
            link rigidly attached after that joint (the tip link for the
            terminal joint)
    """
    group_name: str
    base_link: str
    tip_link: str
    joint_names: Tuple[str, ...]
    torque_limits: np.ndarray
    robot: Optional[Any] = field(default=None, repr=False)
    joint_indices: Tuple[int, ...] = ()
    torque_columns: Tuple[int, ...] = ()
    wrench_links: Tuple[str, ...] = ()

    def __post_init__(self):
        limits = np.array(self.torque_limits, dtype=float)
        limits.setflags(write=False)
        object.__setattr__(self, 'joint_names', tuple(self.joint_names))
        object.__setattr__(self, 'torque_limits', limits)
        for name in ('joint_indices', 'torque_columns', 'wrench_links'):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        if self.torque_limits.ndim != 1 or len(self.torque_limits) != len(self.joint_names):
            raise ConfigurationError(
                f"Expected {len(self.joint_names)} torque limits, got shape {self.torque_limits.shape}"
            )
        if np.any(self.torque_limits < 0.0) or not np.all(np.isfinite(self.torque_limits)):
            raise ConfigurationError(
                f"Torque limits must be finite and non-negative: {self.torque_limits}"
            )
        if self.robot is not None:
            for name in ('joint_indices', 'torque_columns', 'wrench_links'):
                if len(getattr(self, name)) != self.dof:
                    raise ConfigurationError(f"Expected {self.dof} {name}, got {len(getattr(self, name))}")

    @property
    def dof(self) -> int:
        return len(self.joint_names)

    def get_torque_limits(self):
        """Torque limits as a writable copy"""
        return self.torque_limits.copy()

    def get_info(self):
        return {
            'group': self.group_name,
            'base_link': self.base_link,
            'tip_link': self.tip_link,
            'dof': self.dof,
            'joints': list(self.joint_names),
            'tau_max': self.torque_limits,
        }

    # --- construction ---

    @classmethod
    def from_limits(cls, torque_limits, joint_names=None, group_name='chain',
                    base_link='base', tip_link='tip'):
        """Abstract chain with no robot model, for use with an external oracle"""
        torque_limits = np.asarray(torque_limits, dtype=float)
        if joint_names is None:
            joint_names = [f"joint_{i}" for i in range(len(torque_limits))]
        return cls(group_name, base_link, tip_link, tuple(joint_names), torque_limits)

    @classmethod
    def from_description(cls, description, group_name):
        """
        Resolve a group of a RobotDescription into a chain.

        Raises:
            ConfigurationError: the group does not exist, a movable joint has
                no effort limit, or a joint type is not supported
            TopologyError: the group is not a single unbranched chain
        """
        if not description.has_group(group_name):
            error_msg = f"Did not find the group {group_name} in robot model"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        joint_names = description.group_joint_names(group_name)
        path = _order_as_chain(description, group_name, joint_names)

        base_link = path[0].parent
        tip_link = path[-1].child
        logger.info(f"[ChainModel] Base name: {base_link}, Tip name: {tip_link}")

        movable = []
        for joint in path:
            if joint.type not in SUPPORTED_JOINT_TYPES:
                error_msg = f"Joint '{joint.name}' has unsupported type '{joint.type}'"
                logger.error(error_msg)
                raise ConfigurationError(error_msg)
            if joint.movable:
                if joint.effort is None:
                    error_msg = f"Joint '{joint.name}' has no effort limit"
                    logger.error(error_msg)
                    raise ConfigurationError(error_msg)
                movable.append(joint)

        if not movable:
            error_msg = f"Group {group_name} has no movable joints"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        # robot link frames match the URDF link frames only for coordinate-axis joints
        joint = description.parent_joint(tip_link)
        while joint is not None:
            if joint.movable and sum(a != 0.0 for a in joint.axis) != 1:
                error_msg = f"Joint '{joint.name}' axis {joint.axis} is not a coordinate axis"
                logger.error(error_msg)
                raise ConfigurationError(error_msg)
            joint = description.parent_joint(joint.parent)

        robot = description.robot
        if robot is None:
            raise ConfigurationError(f"Robot description '{description.name}' has no dynamics model")

        joint_links = [link for link in robot.links if link.isjoint]
        model_links = [robot.link_dict[joint.child] for joint in movable]

        chain = cls(
            group_name=group_name,
            base_link=base_link,
            tip_link=tip_link,
            joint_names=tuple(joint.name for joint in movable),
            torque_limits=[abs(joint.effort) for joint in movable],
            robot=robot,
            joint_indices=tuple(link.jindex for link in model_links),
            torque_columns=tuple(joint_links.index(link) for link in model_links),
            wrench_links=_wrench_links(path),
        )
        logger.info(f"[ChainModel] DOF: {chain.dof}, Torque limits: {chain.torque_limits}")
        return chain


def _order_as_chain(description, group_name, joint_names):
    """
    Order the group's joints base → tip, failing on anything but a chain.

    The joints must link up child-to-parent with exactly one start and no
    link driving two group joints.
    """
    joints = [description.joints[name] for name in joint_names]
    if not joints:
        error_msg = f"Group {group_name} has no joints"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    child_links = {joint.child for joint in joints}
    roots = [joint for joint in joints if joint.parent not in child_links]
    if len(roots) != 1:
        error_msg = f"Group {group_name} is not a chain. Will not initialize dynamics solver"
        logger.error(error_msg)
        raise TopologyError(error_msg)

    by_parent = {}
    for joint in joints:
        by_parent.setdefault(joint.parent, []).append(joint)

    path = [roots[0]]
    while True:
        following = by_parent.get(path[-1].child, [])
        if not following:
            break
        if len(following) > 1:
            error_msg = (
                f"Group {group_name} is not a chain (link '{path[-1].child}' branches). "
                f"Will not initialize dynamics solver"
            )
            logger.error(error_msg)
            raise TopologyError(error_msg)
        path.append(following[0])

    if len(path) != len(joints):
        error_msg = f"Group {group_name} is not a chain (disconnected joints). Will not initialize dynamics solver"
        logger.error(error_msg)
        raise TopologyError(error_msg)

    return path


def _wrench_links(path):
    # wrench i acts on the last link rigidly attached after movable joint i
    positions = [k for k, joint in enumerate(path) if joint.movable]
    links = []
    for i in range(len(positions)):
        end = positions[i + 1] - 1 if i + 1 < len(positions) else len(path) - 1
        links.append(path[end].child)
    return tuple(links)


# Convenience function
def load_chain(urdf_path, group_name, srdf_path=None, base_link=None, tip_link=None):
    """
    Load a ChainModel straight from files

    Args:
        urdf_path: URDF file path
        group_name: SRDF group name (or the name given to base_link/tip_link)
        srdf_path: SRDF file path (optional)
        base_link, tip_link: define the group directly instead of via SRDF

    Returns:
        ChainModel
    """
    from .description import RobotDescription

    description = RobotDescription.from_file(urdf_path, srdf_path)
    if base_link is not None and tip_link is not None:
        description.add_chain_group(group_name, base_link, tip_link)
    return ChainModel.from_description(description, group_name)
