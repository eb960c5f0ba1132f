from abc import ABC, abstractmethod


class LLMProvider(ABC):
    @abstractmethod
    async def complete(self, prompt: str, system_prompt: str) -> str:
        """
        Send one prompt to the model and return the raw completion text.
        """
        pass
