"""
Feasibility Checker - torques against the chain's torque limits

Checks computed torques (single state or trajectory) against τ_max scaled
by a safety margin, and prints plain text reports for torque checks and
payload estimates.
"""

from enum import Enum

import numpy as np

from .errors import DimensionError


class FeasibilityStatus(Enum):
    FEASIBLE = "feasible"
    INFEASIBLE_TORQUE = "infeasible_torque"


class FeasibilityChecker:
    """
    Torque feasibility for one chain.

    A joint is within limits when |τ| <= τ_max * safety_margin.
    """

    def __init__(self, chain, safety_margin=1.0):
        """
        Args:
            chain: ChainModel
            safety_margin: fraction of τ_max allowed (0.9 = 90%)
        """
        self.chain = chain
        self.safety_margin = safety_margin
        self.tau_max = chain.get_torque_limits() * safety_margin

    def check_torque_feasibility(self, tau_required):
        """
        Args:
            tau_required: torques (shape: [dof] or [timesteps, dof])

        Returns:
            dict: {
                'feasible': bool,
                'status': FeasibilityStatus,
                'exceeded_joints': list,  # joint indices over the limit
                'max_ratio': float,  # > 1.0 means a limit is exceeded
                'ratios': ndarray,  # per-joint |τ| / τ_max
                'tau_required': ndarray,  # per-joint peak |τ|
                'tau_max': ndarray
            }
        """
        tau_required = np.asarray(tau_required, dtype=float)
        if tau_required.shape[-1] != self.chain.dof:
            raise DimensionError('tau_required', self.chain.dof, tau_required.shape[-1])

        if tau_required.ndim == 1:
            tau_abs = np.abs(tau_required)
        else:
            tau_abs = np.max(np.abs(tau_required), axis=0)

        with np.errstate(divide='ignore', invalid='ignore'):
            ratios = tau_abs / self.tau_max
        # zero limit with zero torque is fine, zero limit with any torque is not
        ratios = np.where(tau_abs == 0.0, 0.0, ratios)

        exceeded_joints = np.where(ratios > 1.0)[0].tolist()
        feasible = len(exceeded_joints) == 0

        return {
            'feasible': feasible,
            'status': FeasibilityStatus.FEASIBLE if feasible else FeasibilityStatus.INFEASIBLE_TORQUE,
            'exceeded_joints': exceeded_joints,
            'max_ratio': float(np.max(ratios)),
            'ratios': ratios,
            'tau_required': tau_abs,
            'tau_max': self.tau_max,
        }

    def get_required_scale_factor(self, tau_required):
        """
        Returns:
            float: 1.0 when feasible, otherwise 1 / max ratio
        """
        result = self.check_torque_feasibility(tau_required)
        if result['feasible']:
            return 1.0
        return 1.0 / result['max_ratio']

    def print_feasibility_report(self, result):
        print("=" * 80)
        print(" Torque Feasibility Report")
        print("=" * 80)

        print(f"\n  Status: {result['status'].value}")
        print(f"  Feasible: {result['feasible']}")
        print(f"  Max Ratio: {result['max_ratio']:.2f} ({'EXCEEDED' if result['max_ratio'] > 1.0 else 'OK'})")

        for i, name in enumerate(self.chain.joint_names):
            marker = "  <- exceeded" if i in result['exceeded_joints'] else ""
            print(
                f"    {name:<20} {result['tau_required'][i]:8.2f} / {result['tau_max'][i]:8.2f} N·m"
                f" = {result['ratios'][i]:.2f}x{marker}"
            )

        print(f"\n{'=' * 80}\n")


def print_payload_report(estimate, chain, zero_torques=None):
    """Print a PayloadEstimate joint by joint"""
    print("=" * 80)
    print(f" Payload Report - {chain.group_name} ({chain.base_link} -> {chain.tip_link})")
    print("=" * 80)

    print(f"\n  Combination: {estimate.combination}")
    print(f"  Payload: {estimate.payload:.3f} N ({estimate.as_mass():.3f} kg)")
    if estimate.saturated_joint is not None:
        print(f"  Saturated joint: {chain.joint_names[estimate.saturated_joint]} ({estimate.saturated_joint})")

    print()
    for i, name in enumerate(chain.joint_names):
        value = estimate.joint_payloads[i]
        payload_str = "not loaded" if np.isnan(value) else f"{value:10.3f} N"
        gravity_str = f"  gravity {zero_torques[i]:8.3f} N·m" if zero_torques is not None else ""
        print(f"    {name:<20} limit {chain.torque_limits[i]:8.2f} N·m{gravity_str}  payload {payload_str}")

    print(f"\n{'=' * 80}\n")
