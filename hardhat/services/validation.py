"""
Validation metrics comparing detector predictions with reviewer labels.

Matching is count based: per category, predicted and expected counts are
compared and boxes are never matched geometrically (no IoU). Two
predictions of the same class anywhere in the image are interchangeable.
"""
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from hardhat.core.config import settings
from hardhat.core.exceptions import ValidationError
from hardhat.core.logging import logger
from hardhat.models.schemas.detection import ExpectedDetection
from hardhat.models.schemas.validation import (
    MetricScores,
    Recommendation,
    ValidationCase,
    ValidationCaseResult,
    ValidationMetrics,
    ValidationReport,
    ValidationSummary,
)
from hardhat.services.detector import Detector
from hardhat.services.fanout import run_all
from hardhat.utils.rounding import round_half_away


CATEGORIES = ("helmet", "vest", "no-helmet", "no-vest")

ACCURACY_THRESHOLD = 0.8
PRECISION_THRESHOLD = 0.7
RECALL_THRESHOLD = 0.7
F1_THRESHOLD = 0.75


def _category_counts(items: Iterable[ExpectedDetection]) -> Counter:
    counts = Counter(item.class_name for item in items)
    return Counter({category: counts[category] for category in CATEGORIES})


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def calculate_validation_metrics(
    predictions: Sequence[ExpectedDetection],
    expected: Sequence[ExpectedDetection]
) -> ValidationMetrics:
    """
    Score one image's predictions against its expected labels.

    Labels outside helmet/vest/no-helmet/no-vest are ignored for the
    per-category counts but still count toward ``len(expected)`` in the
    accuracy formula.
    """
    predictions = list(predictions or [])
    expected = list(expected or [])

    if not expected:
        return ValidationMetrics(
            accuracy=1.0 if not predictions else 0.0,
            false_positives=len(predictions)
        )

    predicted_counts = _category_counts(predictions)
    expected_counts = _category_counts(expected)

    true_positives = false_positives = false_negatives = 0
    for category in CATEGORIES:
        predicted = predicted_counts[category]
        wanted = expected_counts[category]
        true_positives += min(predicted, wanted)
        false_positives += max(0, predicted - wanted)
        false_negatives += max(0, wanted - predicted)

    precision = _ratio(true_positives, true_positives + false_positives)
    recall = _ratio(true_positives, true_positives + false_negatives)
    f1_score = _ratio(2 * precision * recall, precision + recall)
    accuracy = (true_positives + (len(expected) - false_positives - false_negatives)) / len(expected)
    # the raw score reaches 2.0 on a perfect match
    accuracy = min(1.0, max(0.0, accuracy))

    return ValidationMetrics(
        accuracy=round_half_away(accuracy, 3),
        precision=round_half_away(precision, 3),
        recall=round_half_away(recall, 3),
        f1_score=round_half_away(f1_score, 3),
        true_positives=true_positives,
        false_positives=false_positives,
        false_negatives=false_negatives
    )


def calculate_overall_metrics(results: Sequence[MetricScores]) -> MetricScores:
    """Unweighted mean of each score across successful test cases."""
    if not results:
        return MetricScores()

    count = len(results)
    return MetricScores(
        accuracy=round_half_away(sum(r.accuracy for r in results) / count, 3),
        precision=round_half_away(sum(r.precision for r in results) / count, 3),
        recall=round_half_away(sum(r.recall for r in results) / count, 3),
        f1_score=round_half_away(sum(r.f1_score for r in results) / count, 3)
    )


def generate_recommendations(metrics: MetricScores) -> List[Recommendation]:
    """Apply the threshold rules; every rule that trips adds one entry."""
    recommendations = []

    if metrics.accuracy < ACCURACY_THRESHOLD:
        recommendations.append(Recommendation(
            type="accuracy",
            message="Model accuracy is below 80%. Consider retraining with more diverse data.",
            severity="high"
        ))

    if metrics.precision < PRECISION_THRESHOLD:
        recommendations.append(Recommendation(
            type="precision",
            message="High false positive rate detected. Consider increasing confidence threshold.",
            severity="medium"
        ))

    if metrics.recall < RECALL_THRESHOLD:
        recommendations.append(Recommendation(
            type="recall",
            message="High false negative rate detected. Consider decreasing confidence threshold.",
            severity="medium"
        ))

    if metrics.f1_score < F1_THRESHOLD:
        recommendations.append(Recommendation(
            type="f1score",
            message="Overall F1 score is low. Model may need retraining or parameter tuning.",
            severity="high"
        ))

    if not recommendations:
        recommendations.append(Recommendation(
            type="success",
            message="Model performance is good. Continue monitoring with regular validation.",
            severity="low"
        ))

    return recommendations


async def run_validation(
    detector: Detector,
    cases: Sequence[ValidationCase],
    confidence: Optional[float] = None,
    max_concurrency: Optional[int] = None
) -> ValidationReport:
    """
    Download each test image, run the detector on it and score the result.

    A failed download or detector call marks only that case as failed;
    failed cases are left out of the overall averages.
    """
    confidence = settings.VALIDATION_CONFIDENCE if confidence is None else confidence
    logger.info(f"Running validation on {len(cases)} test images")

    async def score_case(index: int, case: ValidationCase) -> ValidationCaseResult:
        if not case.image_url:
            raise ValidationError("image_url is required", fields=["image_url"])
        image = await detector.fetch_image(case.image_url)
        response = await detector.infer(image, filename=f"test_{index}.jpg", confidence=confidence)
        return ValidationCaseResult(
            test_case_index=index,
            image_url=case.image_url,
            success=True,
            predictions=response.predictions,
            expected_detections=case.expected_detections,
            validation=calculate_validation_metrics(response.predictions, case.expected_detections)
        )

    outcomes = await run_all(cases, score_case, max_concurrency=max_concurrency)

    results = []
    for outcome, case in zip(outcomes, cases):
        if outcome.success:
            results.append(outcome.value)
        else:
            results.append(ValidationCaseResult(
                test_case_index=outcome.index,
                image_url=case.image_url,
                success=False,
                error=f"Test case {outcome.index}: {outcome.error_message}"
            ))

    scored = [result.validation for result in results if result.success]
    overall = calculate_overall_metrics(scored)

    return ValidationReport(
        summary=ValidationSummary(
            total_tests=len(cases),
            successful_tests=len(scored),
            failed_tests=len(cases) - len(scored),
            overall_accuracy=overall.accuracy,
            overall_precision=overall.precision,
            overall_recall=overall.recall,
            overall_f1_score=overall.f1_score
        ),
        results=results,
        recommendations=generate_recommendations(overall)
    )
