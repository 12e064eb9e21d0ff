"""
LLM provider interface.

Defines the contract for text generation access.
Implementations: Gemini API, LiteLLM (OpenAI, Bedrock, etc.)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Sequence


@dataclass(frozen=True)
class LLMMessage:
    """One conversation turn sent to the model."""

    role: Literal["user", "model"]
    text: str


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    async def generate(
        self,
        contents: Sequence[LLMMessage],
        temperature: float = 0.7,
        max_output_tokens: int = 1024,
    ) -> str:
        """
        Generate a reply for the given conversation.

        Args:
            contents: Conversation turns, oldest first
            temperature: Sampling temperature
            max_output_tokens: Output token cap

        Returns:
            Generated text (never empty)

        Raises:
            OverloadError: The service is overloaded or rate limiting
            LLMError: Any other failure, including an empty response
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass
