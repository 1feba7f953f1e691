"""
Favorite Places AI Backend - Abstract Text Generator Interface
===============================================================

What:  Contract for the generative text model used by every AI task.
How:   Concrete providers inherit from TextGenerator and implement generate().
Who:   AIService depends on this interface only; tests substitute stubs.
"""

from abc import ABC, abstractmethod


class TextGenerator(ABC):
    """
    Single-string-in, single-string-out text generation.

    Contract:
        - generate() performs exactly one upstream call (no internal retries)
        - Every provider-specific failure is wrapped in GenerationError
        - The full text is returned at once; nothing is streamed

    Implementations:
        - GeminiTextGenerator: Google Gemini (default)
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Send `prompt` to the model and return its raw text answer.

        Raises:
            GenerationError: The call failed for any reason. Carries the
                upstream message.
        """
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present. Does not make a network call."""
        ...
