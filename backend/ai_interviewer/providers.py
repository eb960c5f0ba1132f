import json
import logging
import re
import threading
from typing import Optional

from .interfaces import LLMProvider
from .interviewer.config import PipelineConfig
from .interviewer.prompt_generator import SCORING_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class MockLLM(LLMProvider):
    """
    MockLLM for development/testing: returns canned, schema-conforming JSON
    regardless of the prompt's technology.

    THIS IS EXPECTED BEHAVIOR IN DEVELOPMENT MODE. Set AI_MODE=live and
    GROQ_API_KEY to talk to the real model.
    """

    async def complete(self, prompt: str, system_prompt: str = "") -> str:
        logger.info(f"🧠 MockLLM.complete: received prompt of {len(prompt)} chars")
        if system_prompt == SCORING_SYSTEM_PROMPT:
            return self._analysis(prompt)
        if '"correctOption"' in prompt:
            return self._mcq_question(prompt)
        if '"isCode": true' in prompt:
            return self._coding_question(prompt)
        return self._subjective_question(prompt)

    def _tier(self, prompt: str) -> int:
        match = re.search(r'"difficulty": (\d)', prompt)
        return int(match.group(1)) if match else 1

    def _mcq_question(self, prompt: str) -> str:
        return json.dumps({
            "question": "Which data structure offers average O(1) lookups by key?",
            "expectedTopics": ["hash tables", "time complexity"],
            "difficulty": self._tier(prompt),
            "modelAnswer": {
                "options": {
                    "A": "Linked list",
                    "B": "Hash table",
                    "C": "Binary heap",
                    "D": "Sorted array",
                },
                "correctOption": "B",
                "explanation": "Hash tables map keys to buckets, giving average constant-time lookups.",
            },
        })

    def _coding_question(self, prompt: str) -> str:
        return json.dumps({
            "question": "Write a function that returns the n-th Fibonacci number iteratively.",
            "expectedTopics": ["iteration", "edge cases", "time complexity"],
            "difficulty": self._tier(prompt),
            "modelAnswer": {
                "isCode": True,
                "content": "def fib(n):\n    a, b = 0, 1\n    for _ in range(n):\n        a, b = b, a + b\n    return a",
            },
        })

    def _subjective_question(self, prompt: str) -> str:
        return json.dumps({
            "question": "How would you diagnose a service whose latency doubled after a deploy?",
            "expectedTopics": ["metrics", "profiling", "rollback", "root cause analysis"],
            "difficulty": self._tier(prompt),
            "modelAnswer": {
                "isCode": False,
                "content": "Compare metrics before and after, profile hot paths, roll back if needed, then find the root cause.",
            },
        })

    def _analysis(self, prompt: str) -> str:
        topics = re.findall(r"^- (.+)$", prompt, flags=re.M)
        half = len(topics) // 2
        return json.dumps({
            "score": 5,
            "feedback": "Mock analysis: the answer covers some of the expected topics.",
            "coveredTopics": topics[:half],
            "missingTopics": topics[half:],
            "improvement": "Address the missing topics explicitly.",
        })


_live_llm = None
_live_llm_lock = threading.Lock()


def get_llm(config: Optional[PipelineConfig] = None) -> LLMProvider:
    config = config or PipelineConfig.from_env()
    if config.mode == "live":
        return _get_live_llm(config)
    logger.info("ℹ️  Using MockLLM (AI_MODE=mock)")
    return MockLLM()


def _get_live_llm(config: PipelineConfig) -> LLMProvider:
    """One GroqLLM (and one HTTP session) per process, rebuilt only when the config changes."""
    global _live_llm
    with _live_llm_lock:
        if _live_llm is not None and _live_llm.config == config:
            return _live_llm
        from .live_providers.groq_llm import GroqLLM
        if _live_llm is not None:
            _live_llm.session.close()
        _live_llm = GroqLLM(config=config)
        logger.info(f"✅ Loaded live Groq LLM provider (model={config.model})")
        return _live_llm
