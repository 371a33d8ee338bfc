"""
End-to-end tests for the analysis pipeline and the command line entry point
"""
import sys
import os
import json
from unittest.mock import Mock, patch

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import settings
from main import main
from models.comment import Comment
from layer_1_data_import.preparer import prepare_comments
from pipeline import analyze_comments, run_classification
from utils.exceptions import EmptyCorpus, OversizedCorpus

HOTEL_COMMENTS = [
    "the room was expensive and the staff was rude",
    "great breakfast with lots of choice",
    "the pool was clean and the spa was relaxing",
    "checkout took forever at the front desk",
    "wifi kept dropping in the evening",
    "excellent service from the concierge team",
]

DISCOVERY_RESPONSE = json.dumps({
    "themes": [
        {"name": "Staff & Service", "description": "How guests were treated", "keywords": ["staff", "service"]},
        {"name": "Facilities", "description": "Pool, spa and wifi", "keywords": ["pool", "wifi"]},
    ]
})


def make_comments(texts):
    return [Comment(index=i, text=text) for i, text in enumerate(texts)]


def classification_response(assignments) -> str:
    return json.dumps({
        "classifications": [
            {"commentIndex": i + 1, "themeName": theme, "confidence": 0.9}
            for i, theme in enumerate(assignments)
        ]
    })


class TestRunClassification:
    """Test the full classification run"""

    def test_offline_run_uses_keyword_fallback(self):
        comments = make_comments(HOTEL_COMMENTS)
        result = run_classification(comments, use_llm=False)

        assert result.diagnostics.enhanced_by_ai is False
        assert result.diagnostics.classification_mode == "fallback"
        assert result.diagnostics.record_count == len(comments)
        assert result.diagnostics.classification_count == len(comments)
        assert result.diagnostics.batch_count == 0
        assert sum(group.volume for group in result.theme_groups) == len(comments)
        assert all(group.enhanced_by_ai is False for group in result.theme_groups)
        assert [group.topic_id for group in result.theme_groups] == list(range(1, len(result.theme_groups) + 1))

    def test_missing_api_key_falls_back(self):
        with patch.object(settings, "GEMINI_API_KEY", ""):
            result = run_classification(make_comments(HOTEL_COMMENTS))

        assert result.diagnostics.enhanced_by_ai is False
        assert result.diagnostics.classification_mode == "fallback"
        assert "not configured" in result.diagnostics.fallback_reason

    def test_ai_run_with_single_batch(self):
        llm = Mock()
        llm.generate.side_effect = [
            DISCOVERY_RESPONSE,
            classification_response([
                "Staff & Service", "Staff & Service", "Facilities",
                "Staff & Service", "Facilities", "Staff & Service",
            ]),
        ]

        result = run_classification(make_comments(HOTEL_COMMENTS), llm_client=llm)

        assert llm.generate.call_count == 2
        diagnostics = result.diagnostics
        assert diagnostics.enhanced_by_ai is True
        assert diagnostics.classification_mode == "ai"
        assert diagnostics.fallback_reason is None
        assert diagnostics.batch_count == 1
        assert diagnostics.degraded_batches == 0
        assert diagnostics.degraded_records == 0

        titles = {group.title: group for group in result.theme_groups}
        assert set(titles) == {"Staff & Service", "Facilities"}
        assert titles["Staff & Service"].volume == 4
        assert titles["Staff & Service"].percentage == 67
        assert titles["Facilities"].percentage == 33
        assert all(group.enhanced_by_ai for group in result.theme_groups)

    def test_discovery_failure_switches_whole_run_to_fallback(self):
        llm = Mock()
        llm.generate.side_effect = Exception("500 internal server error")

        result = run_classification(make_comments(HOTEL_COMMENTS), llm_client=llm)

        assert llm.generate.call_count == 1
        assert result.diagnostics.enhanced_by_ai is False
        assert "Theme discovery request failed" in result.diagnostics.fallback_reason
        assert sum(group.volume for group in result.theme_groups) == len(HOTEL_COMMENTS)

    def test_degraded_batch_is_reported(self):
        llm = Mock()
        llm.generate.side_effect = [DISCOVERY_RESPONSE, "I could not classify these"]

        result = run_classification(make_comments(HOTEL_COMMENTS), llm_client=llm)

        assert result.diagnostics.enhanced_by_ai is True
        assert result.diagnostics.degraded_batches == 1
        assert result.diagnostics.degraded_records == len(HOTEL_COMMENTS)
        assert [group.title for group in result.theme_groups] == ["Staff & Service"]

    def test_oversized_corpus_fails_before_any_request(self):
        llm = Mock()
        with patch.object(settings, "MAX_DATASET_TOKENS", 100):
            with pytest.raises(OversizedCorpus):
                run_classification(make_comments(HOTEL_COMMENTS), llm_client=llm)
        llm.generate.assert_not_called()

    def test_processable_count_without_prepared_corpus(self):
        result = run_classification(make_comments(HOTEL_COMMENTS + ["1234 5678"]), use_llm=False)
        assert result.diagnostics.record_count == 7
        assert result.diagnostics.processable_count == 6

    def test_empty_corpus(self):
        with pytest.raises(EmptyCorpus):
            run_classification([], use_llm=False)

    def test_result_dict_shape(self):
        data = run_classification(make_comments(HOTEL_COMMENTS), use_llm=False).to_dict()

        assert data["total_comments"] == len(HOTEL_COMMENTS)
        assert data["metadata"]["ai_enhanced"] is False
        assert data["metadata"]["total_topics"] == len(data["topics"])
        overall = data["sentiment"]["overall"]
        assert overall["positive"] + overall["negative"] + overall["neutral"] == len(HOTEL_COMMENTS)
        assert len(data["sentiment"]["details"]) == len(HOTEL_COMMENTS)
        assert data["diagnostics"]["classification_mode"] == "fallback"


class TestAnalyzeComments:
    """Test the structured success/failure wrapper"""

    def test_success(self):
        response = analyze_comments(HOTEL_COMMENTS + ["ok", ""], use_llm=False)
        assert response["success"] is True
        assert response["data"]["total_comments"] == len(HOTEL_COMMENTS)

    def test_prepared_corpus_is_reused(self):
        texts = HOTEL_COMMENTS + ["1234 5678"]
        with patch("pipeline.check_corpus_size") as mock_check:
            response = analyze_comments(texts, use_llm=False)

        mock_check.assert_not_called()
        data = response["data"]
        assert data["diagnostics"]["record_count"] == 7
        assert data["diagnostics"]["processable_count"] == 6
        assert data["avg_word_count"] == prepare_comments(texts).avg_word_count

    def test_empty_input_fails(self):
        response = analyze_comments(["", "no"], use_llm=False)
        assert response["success"] is False
        assert response["error"].startswith("Analysis failed:")

    def test_oversized_input_fails(self):
        with patch.object(settings, "MAX_DATASET_TOKENS", 40):
            response = analyze_comments(HOTEL_COMMENTS, use_llm=False)
        assert response["success"] is False
        assert "Dataset too large" in response["error"]


class TestMain:
    """Test the command line entry point"""

    def test_offline_run_writes_json(self, tmp_path):
        csv_path = tmp_path / "comments.csv"
        csv_path.write_text(
            "id,comment\n" + "".join(f"{i},{text}\n" for i, text in enumerate(HOTEL_COMMENTS)),
            encoding="utf-8",
        )
        output_path = tmp_path / "result.json"

        exit_code = main([str(csv_path), "--offline", "--output", str(output_path)])

        assert exit_code == 0
        data = json.loads(output_path.read_text(encoding="utf-8"))
        assert data["total_comments"] == len(HOTEL_COMMENTS)
        assert data["metadata"]["ai_enhanced"] is False

    def test_usage_errors(self):
        assert main([]) == 2
        assert main(["a.csv", "b.csv"]) == 2
        assert main(["a.csv", "--output"]) == 2

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.csv"), "--offline"]) == 1

    def test_empty_file_fails(self, tmp_path):
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("id,comment\n", encoding="utf-8")
        assert main([str(csv_path), "--offline"]) == 1
