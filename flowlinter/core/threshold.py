"""
Severity threshold policy deciding the process exit status.
"""

from typing import Dict, Mapping, Tuple


DEFAULT_THRESHOLD = "error"
THRESHOLDS = ("error", "warning", "note", "never")

# Severities that fail the run for each threshold
FAILING_SEVERITIES: Dict[str, Tuple[str, ...]] = {
    "never": (),
    "error": ("error",),
    "warning": ("error", "warning"),
    "note": ("error", "warning", "note"),
}


def decide(threshold: str, tally: Mapping[str, int]) -> int:
    """
    Return 1 if any issue at or above the threshold was found, else 0.

    An unknown threshold fails nothing, like ``"never"``. Severities the
    policy does not know never influence the result.
    """
    failing = FAILING_SEVERITIES.get(threshold, ())
    if any(tally.get(severity, 0) > 0 for severity in failing):
        return 1
    return 0
