"""Tests for questionnaire scoring."""
import pytest

from clinical_engine.exceptions import UnknownQuestionnaireError
from clinical_engine.schemas.enums import QuestionnaireKey
from clinical_engine.services.questionnaire_scoring import (
    calculate_groc_score,
    calculate_koos_score,
    calculate_nprs_score,
    calculate_odi_score,
    calculate_quickdash_score,
    calculate_score,
    interpret_groc,
    map_pain_location_to_condition,
    questionnaire_key_for_condition,
)


class TestODI:
    def test_percentage_score(self):
        score = calculate_odi_score([2, 3, 1, 4, 0, 2, 1, 3, 2, 2])
        assert score.total_score == 20
        assert score.normalized_score == 40.0
        assert score.interpretation == "Moderate disability"

    def test_maximum_disability(self):
        score = calculate_odi_score([5] * 10)
        assert score.normalized_score == 100.0
        assert score.interpretation == "Bed-bound or exaggerating"

    def test_unanswered_items_are_excluded(self):
        # Only the valid item counts toward the denominator
        score = calculate_odi_score([6, -1, "x", 2])
        assert score.normalized_score == 40.0

    def test_no_responses(self):
        score = calculate_odi_score([])
        assert score.normalized_score == 0.0
        assert score.interpretation == "No responses"


class TestKOOS:
    def test_no_symptoms_is_100(self):
        score = calculate_koos_score([0] * 5)
        assert score.normalized_score == 100.0
        assert score.interpretation == "Normal function"

    def test_extreme_symptoms_is_0(self):
        score = calculate_koos_score([4, 4])
        assert score.normalized_score == 0.0
        assert score.interpretation == "Extreme impairment"

    def test_moderate_impairment(self):
        score = calculate_koos_score([1, 2])
        assert score.normalized_score == 62.5
        assert score.interpretation == "Moderate impairment"

    def test_no_responses_is_100(self):
        assert calculate_koos_score([]).normalized_score == 100.0


class TestQuickDASH:
    def test_minimum(self):
        score = calculate_quickdash_score([1] * 11)
        assert score.normalized_score == 0.0
        assert score.interpretation == "Minimal disability"

    def test_maximum(self):
        score = calculate_quickdash_score([5] * 11)
        assert score.normalized_score == 100.0
        assert score.interpretation == "Extreme disability"

    def test_mean_based(self):
        score = calculate_quickdash_score([3, 3])
        assert score.normalized_score == 50.0
        assert score.interpretation == "Moderate disability"

    def test_out_of_range_items_ignored(self):
        assert calculate_quickdash_score([0, 6]).interpretation == "No responses"

    @pytest.mark.parametrize(
        "item,label",
        [
            (1, "Minimal disability"),
            (2, "Mild disability"),
            (3, "Moderate disability"),
            (4, "Severe disability"),
            (5, "Extreme disability"),
        ],
    )
    def test_interpretation_labels(self, item, label):
        assert calculate_quickdash_score([item] * 11).interpretation == label


class TestSingleItemScales:
    @pytest.mark.parametrize(
        "response,expected,interpretation",
        [
            (0, 0.0, "No pain"),
            (3, 3.0, "Mild pain"),
            (7, 7.0, "Severe pain"),
            (12, 10.0, "Worst possible pain"),
        ],
    )
    def test_nprs(self, response, expected, interpretation):
        score = calculate_nprs_score([response])
        assert score.normalized_score == expected
        assert score.interpretation == interpretation

    def test_missing_nprs_rating_is_no_pain(self):
        score = calculate_nprs_score([])
        assert score.normalized_score == 0.0
        assert score.interpretation == "No pain"

    def test_missing_groc_rating_is_no_change(self):
        score = calculate_groc_score(["x"])
        assert score.normalized_score == 0.0
        assert score.interpretation == "No change"

    def test_groc_is_clamped(self):
        assert calculate_groc_score([9]).normalized_score == 7.0
        assert calculate_groc_score([-10]).normalized_score == -7.0

    @pytest.mark.parametrize(
        "value,bucket",
        [
            (-7, "Very much worse"),
            (-5, "Very much worse"),
            (-4, "Much worse"),
            (-1, "Somewhat worse"),
            (0, "No change"),
            (2, "Somewhat better"),
            (4, "Much better"),
            (5, "Very much better"),
        ],
    )
    def test_groc_buckets(self, value, bucket):
        assert interpret_groc(value) == bucket


class TestDispatch:
    def test_calculate_score_is_case_insensitive(self):
        assert calculate_score("ODI", [5] * 10).normalized_score == 100.0

    def test_unknown_key_raises(self):
        with pytest.raises(UnknownQuestionnaireError, match="Unknown questionnaire type: sf36"):
            calculate_score("sf36", [1, 2, 3])


class TestConditionMapping:
    @pytest.mark.parametrize(
        "location,condition",
        [
            ("Lower back", "back"),
            ("Lumbar spine", "back"),
            ("Right knee", "knee"),
            ("Patella", "knee"),
            ("Left shoulder", "shoulder"),
            ("Rotator cuff", "shoulder"),
            ("Hip flexor", "hip"),
            ("", "general"),
            (None, "general"),
        ],
    )
    def test_map_pain_location(self, location, condition):
        assert map_pain_location_to_condition(location) == condition

    def test_questionnaire_for_condition(self):
        assert questionnaire_key_for_condition("back") == QuestionnaireKey.ODI
        assert questionnaire_key_for_condition("Knee") == QuestionnaireKey.KOOS
        assert questionnaire_key_for_condition("shoulder") == QuestionnaireKey.QUICKDASH
        assert questionnaire_key_for_condition("hip") == QuestionnaireKey.NPRS
