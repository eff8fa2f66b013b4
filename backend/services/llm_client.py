import logging

import groq
import requests
from groq import Groq

from models import Style
from services.prompts import GROQ_PROMPTS, OLLAMA_PROMPTS, SYSTEM_PROMPT, build_prompt

LOGGER = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to generate summary."

GROQ_MODELS = {
    "llama3": "llama-3.1-8b-instant",
    "gemma2": "gemma2-9b-it",
}


class ProviderError(Exception):
    """A model call failed; message is safe to show to the user."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GroqProvider:
    name = "groq"

    def __init__(self, api_key: str = None, timeout: float = 30.0, client=None):
        if client is None and api_key:
            client = Groq(api_key=api_key, timeout=timeout, max_retries=0)
        self.client = client

    @property
    def models(self):
        return list(GROQ_MODELS)

    def summarize(self, style: Style, text: str, model: str) -> str:
        if self.client is None:
            raise ProviderError("Groq API key is not configured.")

        try:
            response = self.client.chat.completions.create(
                model=GROQ_MODELS[model],
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(GROQ_PROMPTS, style, text)}
                ],
            )
        except groq.APIConnectionError as e:
            LOGGER.error("Groq API connection error: %s", e)
            raise ProviderError("Error connecting to Groq API.")
        except groq.APIStatusError as e:
            LOGGER.error("Groq API error: %s %s", e.status_code, e.message)
            raise ProviderError(f"Groq API error: {e.status_code} {e.message}")
        except Exception as e:
            LOGGER.exception("Groq error: %s", e)
            raise ProviderError(GENERIC_FAILURE)

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices and choices[0].message else None
        return content or GENERIC_FAILURE


class OllamaProvider:
    name = "ollama"

    def __init__(self, base_url: str = "http://localhost:11434", models=None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._models = list(models or ["llama3", "gemma2"])

    @property
    def models(self):
        return list(self._models)

    def summarize(self, style: Style, text: str, model: str) -> str:
        LOGGER.info("Calling Ollama API with model %s", model)

        try:
            response = requests.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": model,
                    "prompt": build_prompt(OLLAMA_PROMPTS, style, text),
                    "stream": False,
                },
                timeout=self.timeout,
            )
        except requests.ConnectionError as e:
            LOGGER.error("Ollama API connection error: %s", e)
            raise ProviderError("Error connecting to Ollama API. Is it running?")
        except requests.Timeout as e:
            LOGGER.error("Ollama API timed out: %s", e)
            raise ProviderError("Ollama API timed out.")
        except Exception as e:
            LOGGER.exception("Ollama request failed: %s", e)
            raise ProviderError(GENERIC_FAILURE)

        if not response.ok:
            LOGGER.error("Ollama API error: %s", response.text)
            raise ProviderError(f"Ollama API error: {response.status_code} {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            LOGGER.error("Ollama returned invalid JSON: %s", e)
            raise ProviderError(GENERIC_FAILURE)

        if not isinstance(result, dict):
            LOGGER.error("Ollama returned unexpected payload: %r", result)
            raise ProviderError(GENERIC_FAILURE)

        return result.get("response") or ""


def build_providers(settings) -> dict:
    return {
        "groq": GroqProvider(api_key=settings.groq_api_key, timeout=settings.llm_timeout_seconds),
        "ollama": OllamaProvider(
            base_url=settings.ollama_url,
            models=settings.ollama_models,
            timeout=settings.llm_timeout_seconds,
        ),
    }
