import logging
import random
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the model gives no usable answer within the retry budget."""


class LLMClient(ABC):
    """Base class for chat backends.

    Subclasses implement one request in ``_generate`` (whole reply) and
    ``_generate_stream`` (fragment by fragment).  This class owns retries.
    """

    def __init__(self, max_retries: int = 3, retry_delay: float = 2.0,
                 stream: bool = True):
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.stream = stream
        self._stream_callback: Optional[Callable[[str], None]] = None

    def set_stream_callback(self, callback: Callable[[str], None]) -> None:
        """Set a callback that receives each streamed content fragment."""
        self._stream_callback = callback

    # ── Public entry point ──

    def generate_response(self, prompt: str, system: str = "") -> str:
        """Return the model's reply to *prompt*.

        Failed or blank replies are retried with jittered exponential
        backoff.  A streaming failure switches the remaining attempts to
        one-shot requests.

        Raises
        ------
        LLMError
            When every attempt failed or came back blank.
        """
        streaming = self.stream
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            final = attempt == self.max_retries
            try:
                reply = self._request(prompt, system, streaming)
            except Exception as e:
                last_error = e
                logger.warning("[LLM] Attempt %d/%d failed: %s",
                               attempt, self.max_retries, e)
                if streaming:
                    logger.warning("[LLM] Switching to non-streaming requests")
                    streaming = False
                if not final:
                    self._backoff(attempt, rate_limited="429" in str(e))
                continue

            if reply and reply.strip():
                return reply

            logger.warning("[LLM] Blank reply on attempt %d/%d",
                           attempt, self.max_retries)
            if final:
                raise LLMError("LLM returned empty response after all retries")
            self._backoff(attempt)

        raise LLMError(
            f"LLM failed after {self.max_retries} retries: {last_error}")

    def _request(self, prompt: str, system: str, streaming: bool) -> str:
        if streaming:
            return self._generate_stream(prompt, system)
        return self._generate(prompt, system)

    def _backoff(self, attempt: int, rate_limited: bool = False) -> None:
        delay = self.retry_delay * (2 ** (attempt - 1))
        if rate_limited:
            delay *= 2
            logger.info("[LLM] Rate limited (429), waiting %.1fs", delay)
        time.sleep(delay + delay * 0.1 * random.random())

    # ── Subclass hooks ──

    @abstractmethod
    def _generate(self, prompt: str, system: str = "") -> str:
        """One-shot generation."""

    @abstractmethod
    def _generate_stream(self, prompt: str, system: str = "") -> str:
        """Streaming generation.  Each fragment goes to
        ``self._stream_callback`` when one is set."""
