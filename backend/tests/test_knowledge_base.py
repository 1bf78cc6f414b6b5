"""Tests for knowledge base classification records and statistics."""

import json

import pytest
from pydantic import ValidationError

from docdrift.schemas.knowledge_base import DocClassification, KnowledgeBase


def _doc(path, sensitivity, staleness, patterns=None, category=None, confidence=0.5):
    return DocClassification(
        path=path,
        code_sensitivity_level=sensitivity,
        staleness_risk=staleness,
        technical_patterns=patterns or [],
        doc_category=category,
        confidence_score=confidence,
    )


class TestDocClassification:
    def test_accepts_staleness_alias(self):
        doc = DocClassification.model_validate(
            {"path": "README.md", "code_sensitivity_level": 2, "staleness_risk_level": 3}
        )
        assert doc.staleness_risk == 3

    def test_null_lists_become_empty(self):
        doc = DocClassification.model_validate(
            {
                "path": "README.md",
                "code_sensitivity_level": 0,
                "staleness_risk": 1,
                "technical_patterns": None,
                "key_indicators": None,
                "confidence_score": None,
            }
        )
        assert doc.technical_patterns == []
        assert doc.key_indicators == []
        assert doc.confidence_score == 0.0

    @pytest.mark.parametrize(
        "field,value",
        [("code_sensitivity_level", 4), ("code_sensitivity_level", -1), ("staleness_risk", 0)],
    )
    def test_rejects_out_of_range_levels(self, field, value):
        data = {"path": "a.md", "code_sensitivity_level": 1, "staleness_risk": 1, field: value}
        with pytest.raises(ValidationError):
            DocClassification.model_validate(data)

    def test_category_contains(self):
        doc = _doc("a.md", 1, 1, category="api_reference")
        assert doc.category_contains("api", "setup")
        assert not doc.category_contains("tutorial")
        assert not _doc("b.md", 1, 1).category_contains("api")


class TestKnowledgeBaseStats:
    def test_empty_repository(self):
        kb = KnowledgeBase.from_classifications("octo/docs", [])

        assert kb.total_files == 0
        assert kb.files == []
        assert kb.avg_code_sensitivity == 0
        assert kb.top_patterns == {}

    def test_aggregates(self):
        files = [
            _doc("a.md", 3, 3, ["api", "auth"], "api_reference", 0.9),
            _doc("b.md", 2, 1, ["api"], "api_reference", 0.6),
            _doc("c.md", 0, 2, [], "readme", 0.3),
        ]
        kb = KnowledgeBase.from_classifications("octo/docs", files)

        assert kb.total_files == 3
        assert kb.avg_code_sensitivity == pytest.approx(1.67)
        assert kb.avg_staleness_risk == 2.0
        assert kb.avg_confidence == 0.6
        assert kb.high_sensitivity_files == 1
        assert kb.high_staleness_files == 1
        assert kb.high_risk_files == 1
        assert kb.sensitivity_distribution == {"3": 1, "2": 1, "0": 1}
        assert kb.top_patterns == {"api": 2, "auth": 1}
        assert kb.top_categories == {"api_reference": 2, "readme": 1}
        assert kb.sensitivity_histogram() == {0: 1, 2: 1, 3: 1}

    def test_top_patterns_capped_at_ten(self):
        files = [_doc(f"d{i}.md", 1, 1, [f"p{i}"]) for i in range(15)]
        kb = KnowledgeBase.from_classifications("octo/docs", files)
        assert len(kb.top_patterns) == 10


class TestPersistence:
    def test_save_and_load(self, tmp_path):
        kb = KnowledgeBase.from_classifications("octo/docs", [_doc("a.md", 2, 2, ["api"])])
        path = kb.save(tmp_path / "nested" / "kb.json")

        data = json.loads(path.read_text())
        assert data["repository"] == "octo/docs"
        assert data["files"][0]["path"] == "a.md"

        loaded = KnowledgeBase.load(path)
        assert loaded.files[0].technical_patterns == ["api"]
        assert loaded.generated_at == kb.generated_at

    def test_load_invalid_json_raises_value_error(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            KnowledgeBase.load(path)
