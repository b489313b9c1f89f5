"""Analysis over assembled graphs and the full dependency network."""

from bcmgraph.analysis.compliance import (
    ComplianceReport,
    ComplianceViolation,
    SpofCandidate,
    evaluate,
    find_recovery_violations,
    find_single_points_of_failure,
)
from bcmgraph.analysis.network_stats import NetworkStats, build_network, network_stats

__all__ = [
    # compliance exports
    "ComplianceReport",
    "ComplianceViolation",
    "SpofCandidate",
    "evaluate",
    "find_recovery_violations",
    "find_single_points_of_failure",
    # network_stats exports
    "NetworkStats",
    "build_network",
    "network_stats",
]
