"""
Per-record compliance counts derived from raw class labels.
"""
from typing import Iterable

from hardhat.models.schemas.detection import ComplianceSummary, ExpectedDetection


def calculate_summary(detections: Iterable[ExpectedDetection]) -> ComplianceSummary:
    """
    Count helmet/vest labels by case-insensitive substring match.

    "no-helmet" counts as a missing helmet and is excluded from the
    positive counts, as is any label containing "no-".
    """
    total = helmets = vests = no_helmets = no_vests = 0

    for detection in detections or []:
        label = detection.class_name.lower()
        total += 1
        negated = "no-" in label
        if "helmet" in label and not negated:
            helmets += 1
        if "vest" in label and not negated:
            vests += 1
        if "no-helmet" in label:
            no_helmets += 1
        if "no-vest" in label:
            no_vests += 1

    return ComplianceSummary(
        total_detections=total,
        helmet_count=helmets,
        vest_count=vests,
        no_helmet_count=no_helmets,
        no_vest_count=no_vests
    )
