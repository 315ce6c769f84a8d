"""
Payload estimation command line

    python -m payload_estimation robot.urdf --srdf robot.srdf --group arm --q 0 0.3 -0.5
"""

import argparse
import logging
import sys

import numpy as np

from .config import COMBINATIONS, AXES, EstimatorConfig, load_config
from .description import RobotDescription
from .errors import PayloadEstimationError
from .feasibility import FeasibilityChecker, print_payload_report
from .solver import DynamicsSolver


def build_parser():
    parser = argparse.ArgumentParser(description='Joint torques and maximum static payload of a serial chain')
    parser.add_argument('urdf', help='URDF file')
    parser.add_argument('--srdf', help='SRDF file with the joint groups')
    parser.add_argument('--group', required=True, help='Chain group name')
    parser.add_argument('--base-link', help='Define the group as the chain from this link (no SRDF needed)')
    parser.add_argument('--tip-link', help='Define the group as the chain to this link (no SRDF needed)')
    parser.add_argument('--q', type=float, nargs='+', help='Joint positions (default: all zero)')
    parser.add_argument('--config', help='Estimator config JSON file')
    parser.add_argument('--combination', choices=COMBINATIONS, help='Per-joint payload combination')
    parser.add_argument('--axis', choices=sorted(AXES), help='Tip-frame axis of the reference force')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.base_link is None) != (args.tip_link is None):
        parser.error('--base-link and --tip-link must be given together')

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = load_config(args.config) if args.config else EstimatorConfig()
        config = config.replace(combination=args.combination, reference_axis=args.axis)

        description = RobotDescription.from_file(args.urdf, args.srdf)
        if args.base_link is not None:
            description.add_chain_group(args.group, args.base_link, args.tip_link)

        solver = DynamicsSolver(config)
        chain = solver.initialize(description, args.group)

        q = np.array(args.q) if args.q is not None else np.zeros(chain.dof)
        zeros = np.zeros(chain.dof)
        zero_torques = solver.get_torques(q, zeros, zeros)
        estimate = solver.get_max_payload(q)

    except PayloadEstimationError as e:
        print(f"[X] FAILED: {e}")
        return 1

    checker = FeasibilityChecker(chain, safety_margin=config.safety_margin)
    checker.print_feasibility_report(checker.check_torque_feasibility(zero_torques))
    print_payload_report(estimate, chain, zero_torques)
    return 0


if __name__ == '__main__':
    sys.exit(main())
