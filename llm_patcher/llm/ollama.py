import json
import logging

import requests

from .base import LLMClient

logger = logging.getLogger(__name__)


class OllamaClient(LLMClient):
    """Client for the Ollama ``/api/chat`` endpoint."""

    def __init__(self, base_url: str, model: str, timeout: int = 300, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url
        self.model = model
        self.timeout = timeout

    def _payload(self, prompt: str, system: str, stream: bool) -> dict:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return {"model": self.model, "messages": messages, "stream": stream}

    # ── Non-streaming generation ──

    def _generate(self, prompt: str, system: str = "") -> str:
        logger.debug("[Ollama] Prompt:\n%s", prompt)
        response = requests.post(
            self.base_url, json=self._payload(prompt, system, False),
            timeout=(10, self.timeout))
        response.raise_for_status()
        data = response.json()
        result = data.get("message", {}).get("content", "")
        logger.debug(
            "[Ollama] Usage: prompt=%s completion=%s",
            data.get("prompt_eval_count"), data.get("eval_count"))
        logger.debug("[Ollama] Response:\n%s", result)
        return result

    # ── Streaming generation ──

    def _generate_stream(self, prompt: str, system: str = "") -> str:
        logger.debug("[Ollama] Streaming prompt:\n%s", prompt)
        content_parts: list[str] = []

        response = requests.post(
            self.base_url, json=self._payload(prompt, system, True),
            stream=True, timeout=(10, self.timeout))
        response.raise_for_status()

        for line in response.iter_lines(decode_unicode=True):
            if not line:
                continue
            try:
                chunk = json.loads(line)
            except json.JSONDecodeError:
                continue  # skip malformed lines

            token = chunk.get("message", {}).get("content", "")
            if token:
                content_parts.append(token)
                if self._stream_callback:
                    self._stream_callback(token)

            if chunk.get("done", False):
                break

        result = "".join(content_parts)
        logger.debug("[Ollama] Response:\n%s", result)
        return result
