import base64
import json
import logging
import time
from typing import Optional, Protocol

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import OllamaLLM

from config import settings
from errors import BackendUnavailable

logger = logging.getLogger(__name__)


class GenerativeBackend(Protocol):
    """Anything that turns a prompt (plus optional schema and image) into raw model text."""

    def generate(
        self,
        prompt: str,
        schema: Optional[dict] = None,
        image: Optional[bytes] = None,
        temperature: Optional[float] = None,
    ) -> str:
        ...


def initialize_llm_with_model(model_name: str, schema: dict = None, temperature: float = None):
    """Initialize the LLM with a specific model name, constrained to a JSON schema when one is given."""
    if temperature is None:
        temperature = settings.LLM_TEMPERATURE
    if model_name.startswith("gemini"):
        logger.debug("[LLM] Initializing %s...", model_name)
        kwargs = {}
        if schema is not None:
            kwargs["response_mime_type"] = "application/json"
            kwargs["response_schema"] = schema
        return ChatGoogleGenerativeAI(
            model=model_name,
            temperature=temperature,
            google_api_key=settings.GOOGLE_API_KEY or None,
            **kwargs,
        )
    elif model_name.startswith("llama"):
        logger.debug("[LLM] Initializing %s...", model_name)
        return OllamaLLM(model=model_name, temperature=temperature, format=schema or "")
    else:
        raise ValueError(f"Unsupported model: {model_name}. Supported models: gemini-2.5-flash, llama3.2")


class LangChainBackend:
    """
    Generative backend built on LangChain chat/LLM wrappers.

    Gemini gets images as a base64 data URL inside a multimodal message, Ollama
    through its ``images`` option. Every client-side failure is reported as
    BackendUnavailable after ``retries`` extra attempts.
    """

    def __init__(self, model_name: str = None, retries: int = None, retry_delay: float = 1.0):
        self.model_name = model_name or settings.DEFAULT_MODEL
        self.retries = settings.LLM_MAX_RETRIES if retries is None else retries
        self.retry_delay = retry_delay
        self._clients = {}
        if not self.model_name.startswith(("gemini", "llama")):
            raise ValueError(f"Unsupported model: {self.model_name}. Supported models: gemini-2.5-flash, llama3.2")

    @property
    def provider(self) -> str:
        return "gemini" if self.model_name.startswith("gemini") else "ollama"

    def generate(self, prompt, schema=None, image=None, temperature=None) -> str:
        llm = self._client(schema, temperature)

        last_error = None
        for attempt in range(self.retries + 1):
            try:
                logger.debug("[LLM] Querying %s (attempt %d, image=%s)", self.model_name, attempt + 1, image is not None)
                return self._invoke(llm, prompt, image)
            except Exception as e:
                last_error = e
                logger.warning("[LLM] Attempt %d with %s failed: %s", attempt + 1, self.model_name, e)
                if attempt < self.retries:
                    time.sleep(self.retry_delay * (attempt + 1))
        raise BackendUnavailable(f"Failed to get a response from the AI model ({self.model_name}).") from last_error

    def _client(self, schema, temperature):
        """One client per schema and temperature, built on first use."""
        key = (json.dumps(schema, sort_keys=True) if schema is not None else None, temperature)
        if key not in self._clients:
            try:
                self._clients[key] = initialize_llm_with_model(self.model_name, schema=schema, temperature=temperature)
            except Exception as e:
                logger.error("[LLM] Could not initialize %s: %s", self.model_name, e)
                raise BackendUnavailable(f"AI model {self.model_name} is not configured.") from e
        return self._clients[key]

    def _invoke(self, llm, prompt, image):
        if self.provider == "gemini":
            if image is not None:
                encoded = base64.b64encode(image).decode("utf-8")
                message = HumanMessage(content=[
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": f"data:image/jpeg;base64,{encoded}"},
                ])
                response = llm.invoke([message])
            else:
                response = llm.invoke(prompt)
            # ChatGoogleGenerativeAI returns a message object, extract the content
            content = response.content if hasattr(response, "content") else response
            if isinstance(content, list):
                content = "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
            return str(content)

        # OllamaLLM returns a string directly
        if image is not None:
            return llm.invoke(prompt, images=[base64.b64encode(image).decode("utf-8")])
        return llm.invoke(prompt)
