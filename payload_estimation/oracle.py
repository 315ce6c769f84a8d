"""
Inverse Dynamics Oracles - joint torques for a given joint state and load

τ = M(q)q̈ + C(q, q̇)q̇ + G(q) - Jᵀ(q)·f_ext

where:
- M(q): mass/inertia matrix
- C(q, q̇): Coriolis/centrifugal terms
- G(q): gravity terms
- f_ext: external wrenches acting on the links

The estimator only needs the capability "solve inverse dynamics for N
joints"; any object with `dof` and `solve()` will do.
"""

from abc import ABC, abstractmethod

import numpy as np

from .config import DEFAULT_GRAVITY


class InverseDynamicsOracle(ABC):
    """
    Inverse dynamics capability with a fixed joint count.

    Implementations receive arrays already checked by the estimator:
    q, qd, qdd of shape (dof,) and wrenches of shape (dof, 6). They must be
    deterministic and use a gravity vector fixed at construction.
    """

    dof = 0

    @abstractmethod
    def solve(self, q, qd, qdd, wrenches):
        """
        Args:
            q: joint positions (shape: [dof])
            qd: joint velocities (shape: [dof])
            qdd: joint accelerations (shape: [dof])
            wrenches: external wrench per joint (shape: [dof, 6])

        Returns:
            tau: joint torques/forces (shape: [dof]) [N·m or N]
        """
        raise NotImplementedError


class CallableOracle(InverseDynamicsOracle):
    """Wraps a plain function solve(q, qd, qdd, wrenches) -> tau"""

    def __init__(self, dof, func):
        self.dof = int(dof)
        self._func = func

    def solve(self, q, qd, qdd, wrenches):
        return np.asarray(self._func(q, qd, qdd, wrenches), dtype=float)


class RNEAOracle(InverseDynamicsOracle):
    """
    Recursive Newton-Euler inverse dynamics of a ChainModel's robot (robot.rne).

    The whole URDF model is solved with the joints outside the chain held
    at rest. roboticstoolbox's rne takes no external load for URDF robots,
    so each link wrench is mapped through that link's Jacobian instead:

        τ = rne(q, q̇, q̈) - Σ J_e(q)ᵀ · w_link

    A wrench acts at the link origin and is expressed in the link frame;
    it reduces the torque the joints must supply when it pushes along the
    joint's motion.
    """

    def __init__(self, chain, gravity=DEFAULT_GRAVITY):
        if chain.robot is None:
            raise ValueError(
                f"Chain '{chain.group_name}' has no robot model; "
                "build it from a robot description to use the RNEA oracle"
            )
        self.chain = chain
        self.robot = chain.robot
        self.dof = chain.dof
        self.gravity = [float(g) for g in np.array(gravity, dtype=float).reshape(3)]

        self._joint_indices = np.array(chain.joint_indices, dtype=int)
        self._torque_columns = np.array(chain.torque_columns, dtype=int)
        # link ETS from the robot root, with the robot.q index of each of its joints
        self._wrench_paths = []
        for link in chain.wrench_links:
            ets = self.robot.ets(end=link)
            self._wrench_paths.append((ets, np.array([et.jindex for et in ets.joints()], dtype=int)))

    def solve(self, q, qd, qdd, wrenches):
        n = self.robot.n
        q_full, qd_full, qdd_full = np.zeros(n), np.zeros(n), np.zeros(n)
        q_full[self._joint_indices] = q
        qd_full[self._joint_indices] = qd
        qdd_full[self._joint_indices] = qdd

        tau = self.robot.rne(q_full, qd_full, qdd_full, gravity=self.gravity)
        tau = np.asarray(tau, dtype=float).reshape(-1)[self._torque_columns]

        # wrench torques, addressed by robot.q index
        load = np.zeros(n)
        for (ets, jindices), wrench in zip(self._wrench_paths, wrenches):
            if not np.any(wrench):
                continue
            jacobian = np.asarray(ets.jacobe(q_full[jindices]), dtype=float)
            load[jindices] += jacobian.T @ wrench

        return tau - load[self._joint_indices]


class ToolboxOracle(InverseDynamicsOracle):
    """
    Adapter over a roboticstoolbox DHRobot (robot.rne).

    The toolbox only takes a load at the end-effector, so only the terminal
    joint's wrench may be non-zero. The wrench is negated on the way in:
    here it acts on the link, the toolbox's `fext` is what the end-effector
    exerts on its environment.
    """

    def __init__(self, robot, gravity=DEFAULT_GRAVITY):
        self.robot = robot
        self.dof = robot.n
        self.gravity = [float(g) for g in gravity]

    def solve(self, q, qd, qdd, wrenches):
        if np.any(wrenches[:-1] != 0.0):
            raise ValueError(
                f"{type(self).__name__} supports an external wrench on the terminal joint only"
            )
        tau = self.robot.rne(q, qd, qdd, gravity=self.gravity, fext=-wrenches[-1])
        return np.asarray(tau, dtype=float).reshape(-1)
