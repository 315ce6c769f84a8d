"""
Robot Description - URDF model and SRDF joint groups

The URDF is loaded with roboticstoolbox:
- joint topology, types, axes and effort limits (URDF parser records)
- a roboticstoolbox Robot built from the same file, used for dynamics

SRDF <group> entries (chains, joints, links, subgroups) are read with
ElementTree, roboticstoolbox has no SRDF reader.
"""

import io
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import roboticstoolbox as rtb
from roboticstoolbox.models.URDF.URDFRobot import URDF_file
from roboticstoolbox.tools.urdf import URDF

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

MOVABLE_JOINT_TYPES = ('revolute', 'continuous', 'prismatic')
SUPPORTED_JOINT_TYPES = MOVABLE_JOINT_TYPES + ('fixed',)


@dataclass
class LinkInfo:
    name: str
    mass: float = 0.0


@dataclass
class JointInfo:
    name: str
    type: str
    parent: str
    child: str
    axis: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    effort: Optional[float] = None

    @property
    def movable(self) -> bool:
        return self.type in MOVABLE_JOINT_TYPES


@dataclass
class GroupInfo:
    """SRDF group: any mix of chains, joints, links and subgroups"""
    name: str
    chains: List[Tuple[str, str]] = field(default_factory=list)
    joints: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    subgroups: List[str] = field(default_factory=list)


def _link_info(urdf_link):
    mass = urdf_link.inertial.mass
    return LinkInfo(name=urdf_link.name, mass=float(mass) if mass is not None else 0.0)


def _joint_info(urdf_joint):
    limit = urdf_joint.limit
    joint = JointInfo(
        name=urdf_joint.name,
        type=urdf_joint.joint_type,
        parent=urdf_joint.parent,
        child=urdf_joint.child,
        axis=tuple(float(a) for a in urdf_joint.axis),
        effort=float(limit.effort) if limit is not None and limit.effort is not None else None,
    )
    if joint.movable and not any(joint.axis):
        raise ConfigurationError(f"Joint '{joint.name}' has a zero axis")
    return joint


def _parse_group(group_elem):
    group = GroupInfo(name=group_elem.get('name'))
    for child in group_elem:
        if child.tag == 'chain':
            group.chains.append((child.get('base_link'), child.get('tip_link')))
        elif child.tag == 'joint':
            group.joints.append(child.get('name'))
        elif child.tag == 'link':
            group.links.append(child.get('name'))
        elif child.tag == 'group':
            group.subgroups.append(child.get('name'))
    return group


class RobotDescription:
    """
    Kinematic tree, dynamics model and joint groups of one robot.

    Build with from_file() / from_string(); groups come from an SRDF or
    from add_chain_group().
    """

    def __init__(self, name, links, joints, robot=None, groups=None):
        self.name = name
        self.links: Dict[str, LinkInfo] = {link.name: link for link in links}
        self.joints: Dict[str, JointInfo] = {joint.name: joint for joint in joints}
        self.robot = robot
        self.groups: Dict[str, GroupInfo] = dict(groups or {})

        self._parent_joint = {}
        for joint in self.joints.values():
            if joint.child in self._parent_joint:
                raise ConfigurationError(
                    f"Link '{joint.child}' has more than one parent joint "
                    f"('{self._parent_joint[joint.child].name}', '{joint.name}')"
                )
            for link_name in (joint.parent, joint.child):
                if link_name not in self.links:
                    raise ConfigurationError(
                        f"Joint '{joint.name}' references unknown link '{link_name}'"
                    )
            self._parent_joint[joint.child] = joint

    # --- construction ---

    @classmethod
    def from_string(cls, urdf_xml, srdf_xml=None):
        try:
            urdf = URDF.loadstr(urdf_xml, None)
        except Exception as e:
            error_msg = f"URDF parsing failed - {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        links = [_link_info(link) for link in urdf.links]
        joints = [_joint_info(joint) for joint in urdf.joints]
        # topology checks run before the dynamics model is built
        description = cls(urdf.name, links, joints)

        try:
            elinks, name, _ = URDF_file(io.StringIO(urdf_xml))
            description.robot = rtb.Robot(elinks, name=name)
        except Exception as e:
            error_msg = f"Failed to build robot model from URDF - {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        if srdf_xml is not None:
            description.load_groups(srdf_xml)

        logger.info(
            f"[RobotDescription] Parsed '{description.name}': "
            f"{len(description.links)} links, {len(description.joints)} joints, "
            f"{description.robot.n} movable, {len(description.groups)} groups"
        )
        return description

    @classmethod
    def from_file(cls, urdf_path, srdf_path=None):
        urdf_xml = _read_text(urdf_path)
        srdf_xml = _read_text(srdf_path) if srdf_path is not None else None
        return cls.from_string(urdf_xml, srdf_xml)

    def load_groups(self, srdf_xml):
        """Add the <group> entries of an SRDF document"""
        try:
            root = ET.fromstring(srdf_xml)
        except ET.ParseError as e:
            error_msg = f"SRDF parsing failed - {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        for group_elem in root.findall('group'):
            group = _parse_group(group_elem)
            self.groups[group.name] = group

    def add_chain_group(self, name, base_link, tip_link):
        """Register a group made of the chain between two links"""
        self.groups[name] = GroupInfo(name=name, chains=[(base_link, tip_link)])

    # --- queries ---

    def has_group(self, name) -> bool:
        return name in self.groups

    def parent_joint(self, link_name) -> Optional[JointInfo]:
        return self._parent_joint.get(link_name)

    def child_joints(self, link_name) -> List[JointInfo]:
        return [joint for joint in self.joints.values() if joint.parent == link_name]

    def path_between(self, base_link, tip_link) -> List[JointInfo]:
        """
        Joints from base_link down to tip_link, in base → tip order.

        Returns:
            list of JointInfo (empty when base_link == tip_link), or None if
            tip_link is not a descendant of base_link
        """
        for link_name in (base_link, tip_link):
            if link_name not in self.links:
                raise ConfigurationError(f"Unknown link '{link_name}'")

        path = []
        link_name = tip_link
        while link_name != base_link:
            joint = self._parent_joint.get(link_name)
            if joint is None:
                return None
            path.append(joint)
            link_name = joint.parent
        path.reverse()
        return path

    def group_joint_names(self, group_name, _visiting=None) -> List[str]:
        """
        All joint names a group refers to, chains and subgroups expanded.

        Links contribute their parent joint. Order follows the SRDF; duplicates
        are dropped.
        """
        if group_name not in self.groups:
            raise ConfigurationError(f"Did not find the group {group_name} in robot model")

        visiting = _visiting or set()
        if group_name in visiting:
            raise ConfigurationError(f"Group '{group_name}' includes itself")
        visiting = visiting | {group_name}

        group = self.groups[group_name]
        names = []
        for base_link, tip_link in group.chains:
            path = self.path_between(base_link, tip_link)
            if path is None:
                raise ConfigurationError(
                    f"Group '{group_name}': '{tip_link}' is not below '{base_link}'"
                )
            names.extend(joint.name for joint in path)
        for joint_name in group.joints:
            if joint_name not in self.joints:
                raise ConfigurationError(f"Group '{group_name}': unknown joint '{joint_name}'")
            names.append(joint_name)
        for link_name in group.links:
            if link_name not in self.links:
                raise ConfigurationError(f"Group '{group_name}': unknown link '{link_name}'")
            joint = self._parent_joint.get(link_name)
            if joint is not None:
                names.append(joint.name)
        for subgroup in group.subgroups:
            names.extend(self.group_joint_names(subgroup, visiting))

        return list(dict.fromkeys(names))


def _read_text(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        error_msg = f"Robot description file not found: {path}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)
