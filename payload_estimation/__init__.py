"""
Payload Estimation Module - joint torques and maximum static payload

Computes the torques a serial chain needs for a joint state and load, and
the largest payload its tip can hold at a configuration without any joint
exceeding its torque limit.

Architecture:
    [URDF + SRDF] → [ChainModel] → [Inverse Dynamics Oracle] → [PayloadEstimator]
                                                                    ↓
                                                          Torque queries
                                                          Payload bound
                                                          Saturation multiplier
"""

from .errors import (
    PayloadEstimationError,
    ConfigurationError,
    TopologyError,
    DimensionError,
    NotInitializedError,
    UnboundedPayloadError,
)
from .config import EstimatorConfig, load_config
from .description import RobotDescription
from .chain_model import ChainModel, load_chain
from .wrench import Wrench
from .oracle import InverseDynamicsOracle, CallableOracle, RNEAOracle, ToolboxOracle
from .estimator import PayloadEstimator, PayloadEstimate
from .feasibility import FeasibilityChecker, FeasibilityStatus, print_payload_report
from .solver import DynamicsSolver

__all__ = [
    'PayloadEstimationError',
    'ConfigurationError',
    'TopologyError',
    'DimensionError',
    'NotInitializedError',
    'UnboundedPayloadError',
    'EstimatorConfig',
    'load_config',
    'RobotDescription',
    'ChainModel',
    'load_chain',
    'Wrench',
    'InverseDynamicsOracle',
    'CallableOracle',
    'RNEAOracle',
    'ToolboxOracle',
    'PayloadEstimator',
    'PayloadEstimate',
    'FeasibilityChecker',
    'FeasibilityStatus',
    'print_payload_report',
    'DynamicsSolver',
]

__version__ = '1.0.0'
