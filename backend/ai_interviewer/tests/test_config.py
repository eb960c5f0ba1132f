import pytest

from ai_interviewer import providers
from ai_interviewer.interviewer.config import (
    Difficulty,
    ModelAnswer,
    PipelineConfig,
    Question,
    QuestionType,
    question_type_for_ordinal,
)
from ai_interviewer.live_providers.groq_llm import GroqLLM
from ai_interviewer.providers import MockLLM, get_llm


class TestEnums:
    @pytest.mark.parametrize("label, tier", [("Easy", 1), ("medium", 2), (" HARD ", 3)])
    def test_difficulty_parse(self, label, tier):
        assert Difficulty.parse(label).tier == tier

    @pytest.mark.parametrize("label", ["", None, "extreme"])
    def test_difficulty_rejects_unknown(self, label):
        with pytest.raises(ValueError):
            Difficulty.parse(label)

    def test_question_type_parse(self):
        assert QuestionType.parse("MCQ") is QuestionType.MCQ
        assert QuestionType.parse(QuestionType.CODING) is QuestionType.CODING
        with pytest.raises(ValueError):
            QuestionType.parse("essay")


class TestQuestionTypeRotation:
    def test_rotates_by_ordinal(self):
        types = ["mcq", "coding", "subjective"]
        assert [question_type_for_ordinal(types, n).value for n in range(1, 7)] == [
            "mcq", "coding", "subjective", "mcq", "coding", "subjective",
        ]

    def test_single_type(self):
        assert question_type_for_ordinal(["coding"], 5) is QuestionType.CODING

    def test_invalid(self):
        with pytest.raises(ValueError):
            question_type_for_ordinal([], 1)
        with pytest.raises(ValueError):
            question_type_for_ordinal(["mcq"], 0)


class TestQuestionRendering:
    def test_mcq_to_dict(self):
        question = Question(
            text="Pick one",
            expected_topics=("x",),
            difficulty_tier=2,
            type=QuestionType.MCQ,
            model_answer=ModelAnswer(
                options={"D": "4", "A": "1", "C": "3", "B": "2"}, correct_option="C", explanation="why",
            ),
        )
        data = question.to_dict()
        assert data["type"] == "mcq"
        assert list(data["modelAnswer"]["options"]) == ["A", "B", "C", "D"]
        assert data["modelAnswer"]["correctOption"] == "C"
        assert "isCode" not in data["modelAnswer"]

    def test_question_is_immutable(self):
        question = Question("t", (), 1, QuestionType.SUBJECTIVE, ModelAnswer(content="c"))
        with pytest.raises(AttributeError):
            question.text = "changed"


class TestPipelineConfig:
    def test_defaults_from_env(self, monkeypatch):
        for name in ("GROQ_API_KEY", "GROQ_MODEL", "LLM_MIN_REQUEST_INTERVAL_MS", "AI_MODE"):
            monkeypatch.delenv(name, raising=False)
        config = PipelineConfig.from_env()
        assert config.api_key is None
        assert config.model == "llama-3.3-70b-versatile"
        assert config.min_request_interval_s == 3.0
        assert config.mode == "mock"

    def test_overrides_from_env(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_x")
        monkeypatch.setenv("GROQ_TEMP", "0.2")
        monkeypatch.setenv("LLM_MIN_REQUEST_INTERVAL_MS", "1500")
        monkeypatch.setenv("AI_MODE", "LIVE")
        config = PipelineConfig.from_env()
        assert config.api_key == "gsk_x"
        assert config.temperature == 0.2
        assert config.min_request_interval_s == 1.5
        assert config.mode == "live"


class TestGetLLM:
    @pytest.fixture(autouse=True)
    def fresh_provider(self, monkeypatch):
        monkeypatch.setattr(providers, "_live_llm", None)

    def test_mock_by_default(self):
        assert isinstance(get_llm(PipelineConfig()), MockLLM)

    def test_live_mode(self):
        llm = get_llm(PipelineConfig.from_dict({"mode": "live", "api_key": "gsk_x"}))
        assert isinstance(llm, GroqLLM)

    def test_live_provider_is_reused(self):
        config = PipelineConfig.from_dict({"mode": "live", "api_key": "gsk_x"})
        first = get_llm(config)
        assert get_llm(PipelineConfig.from_dict({"mode": "live", "api_key": "gsk_x"})) is first

    def test_live_provider_rebuilt_on_config_change(self, monkeypatch):
        first = get_llm(PipelineConfig.from_dict({"mode": "live", "api_key": "gsk_x"}))
        closed = []
        monkeypatch.setattr(first.session, "close", lambda: closed.append(True))
        second = get_llm(PipelineConfig.from_dict({"mode": "live", "api_key": "gsk_y"}))
        assert second is not first
        assert closed == [True]
        assert second.session.headers["Authorization"] == "Bearer gsk_y"
