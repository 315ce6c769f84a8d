"""
Dynamics Solver - single-object front end

    solver = DynamicsSolver()
    solver.initialize(description, 'arm')
    tau = solver.get_torques(q, qd, qdd)
    estimate = solver.get_max_payload(q)

initialize() resolves the group into a ChainModel, builds the RNEA oracle
and keeps a PayloadEstimator. A failed initialize() leaves the solver
without an estimator, and every query then raises NotInitializedError.
"""

import logging

from .chain_model import ChainModel
from .config import EstimatorConfig
from .errors import NotInitializedError
from .estimator import PayloadEstimator
from .oracle import RNEAOracle

logger = logging.getLogger(__name__)


class DynamicsSolver:

    def __init__(self, config=None):
        self.config = config or EstimatorConfig()
        self._estimator = None

    @property
    def initialized(self) -> bool:
        return self._estimator is not None

    @property
    def estimator(self) -> PayloadEstimator:
        if self._estimator is None:
            raise NotInitializedError("Dynamics solver is not initialized")
        return self._estimator

    @property
    def chain(self) -> ChainModel:
        return self.estimator.chain

    def initialize(self, description, group_name, oracle=None):
        """
        Args:
            description: RobotDescription holding the group
            group_name: name of a chain group
            oracle: inverse dynamics oracle; RNEAOracle over the chain when None

        Returns:
            ChainModel of the group

        Raises:
            ConfigurationError, TopologyError: see ChainModel.from_description
        """
        self._estimator = None

        chain = ChainModel.from_description(description, group_name)
        if oracle is None:
            oracle = RNEAOracle(chain, gravity=self.config.gravity)
        self._estimator = PayloadEstimator(chain, oracle, self.config)

        logger.info(f"[DynamicsSolver] Initialized group '{group_name}' ({chain.dof} joints)")
        return chain

    def get_torques(self, position, velocity, acceleration, wrenches=None):
        return self.estimator.get_torques(position, velocity, acceleration, wrenches)

    def get_max_payload(self, position):
        return self.estimator.get_max_payload(position)

    def find_max_torque_multiplier(self, joint_torques, zero_torques):
        return self.estimator.find_max_torque_multiplier(joint_torques, zero_torques)
