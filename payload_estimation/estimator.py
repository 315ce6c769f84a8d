"""
Payload Estimator - maximum static payload at a joint configuration

Algorithm:
1. Baseline: τ_zero = ID(q, 0, 0, no load)
2. Reference load: unit force along one tip-frame axis → τ_load
3. Per joint: contribution = τ_load - τ_zero (per unit of load)
              headroom     = max(τ_max - τ_zero, -τ_max - τ_zero)
              payload_max  = |headroom / contribution|
   Joints the reference load does not reach are left out.
4. Combination: largest per-joint value ('max', historical behaviour) or
   smallest value and its joint ('min', the binding joint).
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import EstimatorConfig
from .errors import DimensionError, UnboundedPayloadError
from .wrench import as_wrench_array, zero_wrenches

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PayloadEstimate:
    """
    Attributes:
        payload: admissible load, in units of the reference force [N]
        saturated_joint: index of the binding joint ('min' mode only)
        joint_payloads: per-joint admissible load, NaN where the joint is
            not loaded by the reference force
        combination: 'max' or 'min'
    """
    payload: float
    saturated_joint: Optional[int]
    joint_payloads: np.ndarray
    combination: str

    def as_mass(self, gravity=9.81):
        """Payload expressed as a mass [kg]"""
        return self.payload / gravity


def _as_joint_vector(values, argument, dof):
    vector = np.asarray(values, dtype=float)
    if vector.ndim != 1:
        raise DimensionError(argument, dof, vector.shape)
    if vector.shape[0] != dof:
        raise DimensionError(argument, dof, vector.shape[0])
    return vector


class PayloadEstimator:
    """
    Torque queries and payload bounds for one chain and one oracle.

    Both the chain and the oracle are fixed at construction; every method is
    a pure function of its arguments, so one instance may be shared between
    threads.
    """

    def __init__(self, chain, oracle, config=None):
        """
        Args:
            chain: ChainModel (joint count and torque limits)
            oracle: InverseDynamicsOracle with oracle.dof == chain.dof
            config: EstimatorConfig (defaults when None)
        """
        if oracle.dof != chain.dof:
            raise DimensionError('oracle', chain.dof, oracle.dof)
        self.chain = chain
        self.oracle = oracle
        self.config = config or EstimatorConfig()

    @property
    def dof(self):
        return self.chain.dof

    def get_torques(self, position, velocity, acceleration, wrenches=None):
        """
        Joint torques for a joint state and external load

        Args:
            position: joint positions (shape: [dof])
            velocity: joint velocities (shape: [dof])
            acceleration: joint accelerations (shape: [dof])
            wrenches: one wrench per joint (shape: [dof, 6]); zero when None

        Returns:
            tau: oracle torques (shape: [dof])

        Raises:
            DimensionError: an argument does not have dof entries
        """
        q = _as_joint_vector(position, 'position', self.dof)
        qd = _as_joint_vector(velocity, 'velocity', self.dof)
        qdd = _as_joint_vector(acceleration, 'acceleration', self.dof)
        w = as_wrench_array(wrenches, self.dof)

        tau = np.asarray(self.oracle.solve(q, qd, qdd, w), dtype=float).reshape(-1)
        if tau.shape[0] != self.dof:
            raise DimensionError('torques', self.dof, tau.shape[0])
        return tau

    def get_torque_trajectory(self, q_traj, qd_traj, qdd_traj):
        """
        Torques along a trajectory, no external load

        Args:
            q_traj, qd_traj, qdd_traj: shape [timesteps, dof]

        Returns:
            tau_traj: shape [timesteps, dof]
        """
        q_traj = np.atleast_2d(np.asarray(q_traj, dtype=float))
        qd_traj = np.atleast_2d(np.asarray(qd_traj, dtype=float))
        qdd_traj = np.atleast_2d(np.asarray(qdd_traj, dtype=float))

        timesteps = q_traj.shape[0]
        for name, traj in (('velocity', qd_traj), ('acceleration', qdd_traj)):
            if traj.shape[0] != timesteps:
                raise DimensionError(f'{name} trajectory', timesteps, traj.shape[0])

        tau_traj = np.zeros((timesteps, self.dof))
        for t in range(timesteps):
            tau_traj[t] = self.get_torques(q_traj[t], qd_traj[t], qdd_traj[t])
        return tau_traj

    def reference_wrenches(self):
        """Zero wrench set with the reference force on the terminal joint"""
        wrenches = zero_wrenches(self.dof)
        wrenches[-1, self.config.axis_index] = self.config.reference_magnitude
        return wrenches

    def get_max_payload(self, position) -> PayloadEstimate:
        """
        Largest static payload at a configuration

        Velocity and acceleration are zero (static analysis).

        Args:
            position: joint positions (shape: [dof])

        Returns:
            PayloadEstimate

        Raises:
            DimensionError: position does not have dof entries
            UnboundedPayloadError: the reference force loads no joint
        """
        q = _as_joint_vector(position, 'position', self.dof)
        zeros = np.zeros(self.dof)

        zero_torques = self.get_torques(q, zeros, zeros, zero_wrenches(self.dof))
        load_torques = self.get_torques(q, zeros, zeros, self.reference_wrenches())

        tau_max = self.chain.torque_limits
        contribution = (load_torques - zero_torques) / self.config.reference_magnitude
        headroom = np.maximum(tau_max - zero_torques, -tau_max - zero_torques)

        joint_payloads = np.full(self.dof, np.nan)
        for i in range(self.dof):
            logger.debug(
                f"Joint: {i}, Torque: {load_torques[i]:f}, Max: {tau_max[i]:f}, Gravity: {zero_torques[i]:f}"
            )
            if contribution[i] == 0.0:
                logger.debug(f"Joint: {i}, not loaded by the reference force")
                continue
            joint_payloads[i] = abs(headroom[i] / contribution[i])
            logger.info(f"Joint: {i}, Payload: {joint_payloads[i]:f}")

        loaded = np.flatnonzero(~np.isnan(joint_payloads))
        if loaded.size == 0:
            raise UnboundedPayloadError(
                f"Reference force along {self.config.reference_axis} loads none of the "
                f"{self.dof} joints of '{self.chain.group_name}'"
            )

        if self.config.combination == 'min':
            saturated_joint = int(loaded[np.argmin(joint_payloads[loaded])])
            payload = float(joint_payloads[saturated_joint])
        else:
            saturated_joint = None
            payload = float(np.max(joint_payloads[loaded]))

        joint_payloads.setflags(write=False)
        return PayloadEstimate(payload, saturated_joint, joint_payloads, self.config.combination)

    def find_max_torque_multiplier(self, joint_torques, zero_torques):
        """
        Largest uniform scale of a load's torques before a joint saturates

        remaining[i] = |τ_max[i]| - |τ_zero[i]|
        ratio[i]     = |τ_joint[i]| / remaining[i]

        Args:
            joint_torques: torques caused by the load (shape: [dof])
            zero_torques: baseline torques without the load (shape: [dof])

        Returns:
            (multiplier, saturated_joint): 1 / max ratio and the joint that
            reaches it; (1.0, None) when no joint is loaded; (0.0, i) when
            joint i has no remaining torque but is loaded
        """
        joint_torques = _as_joint_vector(joint_torques, 'joint_torques', self.dof)
        zero_torques = _as_joint_vector(zero_torques, 'zero_torques', self.dof)

        remaining = np.abs(self.chain.torque_limits) - np.abs(zero_torques)

        max_ratio = 0.0
        saturated_joint = None
        for i in range(self.dof):
            load = abs(joint_torques[i])
            if load == 0.0:
                continue
            if remaining[i] <= 0.0:
                logger.warning(f"Joint: {i}, no torque left above the baseline ({remaining[i]:f})")
                return 0.0, i
            ratio = load / remaining[i]
            if ratio > max_ratio:
                max_ratio = ratio
                saturated_joint = i

        if max_ratio == 0.0:
            return 1.0, None
        return 1.0 / max_ratio, saturated_joint
