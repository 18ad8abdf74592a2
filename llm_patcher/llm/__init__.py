from .base import LLMClient, LLMError
from .ollama import OllamaClient
