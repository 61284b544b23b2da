"""Rules domain: policy, violations and the validation passes."""

from archlint.rules.policy import PackageCoverage, Policy, TestFileLocation
from archlint.rules.validator import validate
from archlint.rules.violations import Violation, ViolationKind

__all__ = [
    "PackageCoverage",
    "Policy",
    "TestFileLocation",
    "Violation",
    "ViolationKind",
    "validate",
]
