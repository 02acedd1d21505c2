import asyncio

from hardhat.core.exceptions import DependencyError
from hardhat.models.schemas.detection import ExpectedDetection
from hardhat.models.schemas.validation import MetricScores, ValidationCase
from hardhat.services.validation import (
    calculate_overall_metrics,
    calculate_validation_metrics,
    generate_recommendations,
    run_validation,
)


def labels(*names):
    return [ExpectedDetection.model_validate({"class": name}) for name in names]


def test_exact_match_scores_one():
    metrics = calculate_validation_metrics(labels("helmet"), labels("helmet"))

    assert metrics.precision == 1.0
    assert metrics.recall == 1.0
    assert metrics.f1_score == 1.0
    assert metrics.accuracy == 1.0


def test_both_empty():
    metrics = calculate_validation_metrics([], [])

    assert metrics.accuracy == 1.0
    assert metrics.precision == 0.0
    assert metrics.recall == 0.0
    assert metrics.f1_score == 0.0


def test_predictions_without_expectations():
    metrics = calculate_validation_metrics(labels("helmet", "vest"), [])

    assert metrics.accuracy == 0.0
    assert metrics.false_positives == 2
    assert metrics.true_positives == 0


def test_extra_prediction_is_a_false_positive():
    metrics = calculate_validation_metrics(labels("helmet", "helmet"), labels("helmet"))

    assert metrics.true_positives == 1
    assert metrics.false_positives == 1
    assert metrics.false_negatives == 0
    assert metrics.precision == 0.5
    assert metrics.recall == 1.0
    assert metrics.f1_score == 0.667
    assert metrics.accuracy == 1.0


def test_missed_detection_is_a_false_negative():
    metrics = calculate_validation_metrics(labels("helmet"), labels("helmet", "vest", "no-vest"))

    assert metrics.true_positives == 1
    assert metrics.false_negatives == 2
    assert metrics.recall == 0.333
    assert metrics.precision == 1.0
    assert metrics.accuracy == 0.667


def test_labels_outside_categories_are_ignored():
    metrics = calculate_validation_metrics(labels("helmet", "person"), labels("helmet", "Helmet"))

    # "Helmet" is not an exact category label, but counts toward len(expected)
    assert metrics.true_positives == 1
    assert metrics.false_positives == 0
    assert metrics.false_negatives == 0
    assert metrics.accuracy == 1.0


def test_position_is_never_considered():
    far_apart = [ExpectedDetection.model_validate({"class": "vest", "x": 10}),
                 ExpectedDetection.model_validate({"class": "vest", "x": 900})]
    metrics = calculate_validation_metrics(far_apart, labels("vest", "vest"))

    assert metrics.true_positives == 2


def test_overall_is_unweighted_mean():
    overall = calculate_overall_metrics([
        MetricScores(accuracy=1.0, precision=1.0, recall=1.0, f1_score=1.0),
        MetricScores(accuracy=0.5, precision=0.25, recall=0.0, f1_score=0.5),
    ])

    assert overall.accuracy == 0.75
    assert overall.precision == 0.625
    assert overall.recall == 0.5
    assert overall.f1_score == 0.75


def test_overall_of_nothing_is_zero():
    overall = calculate_overall_metrics([])
    assert (overall.accuracy, overall.precision, overall.recall, overall.f1_score) == (0, 0, 0, 0)


def test_only_accuracy_rule_fires():
    recommendations = generate_recommendations(
        MetricScores(accuracy=0.75, precision=0.85, recall=0.85, f1_score=0.80)
    )

    assert len(recommendations) == 1
    assert recommendations[0].type == "accuracy"
    assert recommendations[0].severity == "high"


def test_all_rules_fire_independently():
    recommendations = generate_recommendations(MetricScores())

    assert [r.type for r in recommendations] == ["accuracy", "precision", "recall", "f1score"]
    assert [r.severity for r in recommendations] == ["high", "medium", "medium", "high"]


def test_good_metrics_get_success_message():
    recommendations = generate_recommendations(
        MetricScores(accuracy=0.9, precision=0.9, recall=0.9, f1_score=0.9)
    )

    assert len(recommendations) == 1
    assert recommendations[0].type == "success"
    assert recommendations[0].severity == "low"


def test_run_validation_isolates_failures(fake_detector):
    fake_detector.predictions = {
        "test_0.jpg": ["helmet"],
        "test_2.jpg": ["helmet", "helmet"],
    }
    fake_detector.failures = {
        "https://img.test/broken.jpg": DependencyError("Failed to fetch image", upstream_status=404),
    }
    cases = [
        ValidationCase(image_url="https://img.test/ok.jpg", expected_detections=labels("helmet")),
        ValidationCase(image_url="https://img.test/broken.jpg", expected_detections=labels("vest")),
        ValidationCase(image_url="https://img.test/double.jpg", expected_detections=labels("helmet")),
    ]

    report = asyncio.run(run_validation(fake_detector, cases, confidence=0.3))

    assert report.summary.total_tests == 3
    assert report.summary.successful_tests == 2
    assert report.summary.failed_tests == 1
    assert [r.test_case_index for r in report.results] == [0, 1, 2]
    assert report.results[1].success is False
    assert report.results[1].validation is None
    assert "Failed to fetch image" in report.results[1].error
    # precision is 1.0 for the first case and 0.5 for the third
    assert report.summary.overall_precision == 0.75
    assert report.summary.overall_recall == 1.0
    assert all(call["confidence"] == 0.3 for call in fake_detector.calls)


def test_run_validation_with_no_successes(fake_detector):
    fake_detector.failures = {"https://img.test/a.jpg": DependencyError("down")}
    cases = [ValidationCase(image_url="https://img.test/a.jpg")]

    report = asyncio.run(run_validation(fake_detector, cases))

    assert report.summary.successful_tests == 0
    assert report.summary.overall_accuracy == 0.0
    assert report.recommendations[0].type == "accuracy"
