# stuntpitch/services/common/llm_client.py
"""OpenAI chat wrapper shared by every casting agent: plain-text and strict-JSON completions,
prompt loading from stuntpitch/prompts, and one retry policy at the API-call boundary."""
from __future__ import annotations
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from openai import OpenAI, APIConnectionError, APIStatusError, RateLimitError, BadRequestError

from stuntpitch.core.config import settings
from stuntpitch.services.common.retry import retry_on_overload

logger = logging.getLogger("ai.llm")

PROMPTS_DIR = Path(__file__).resolve().parents[2] / "prompts"


@dataclass
class _JSONResponse:
    """Small wrapper to match `.data` access pattern used in the codebase."""
    data: Dict[str, Any]

    @property
    def failed(self) -> bool:
        return "__llm_error__" in self.data


def _require_api_key() -> str:
    """Ensure an API key is configured; raise a clear error otherwise."""
    if not settings.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY is not set. Please add it to your environment or .env file.")
    return settings.OPENAI_API_KEY


# Singleton OpenAI client
_openai_client: Optional[OpenAI] = None


def _get_openai_client() -> OpenAI:
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAI(api_key=_require_api_key())
        logger.info("OpenAI client initialized")
    return _openai_client


def load_prompt(relative_path: str) -> str:
    """
    Load a prompt file from stuntpitch/prompts/<relative_path>.
    Falls back to the basename directly under stuntpitch/prompts/.
    """
    path = PROMPTS_DIR / relative_path
    if path.exists():
        text = path.read_text(encoding="utf-8")
        logger.debug("Loaded prompt: %s (%d chars)", relative_path, len(text))
        return text
    alt = PROMPTS_DIR / Path(relative_path).name
    if alt.exists():
        text = alt.read_text(encoding="utf-8")
        logger.debug("Loaded prompt by basename fallback: %s (%d chars)", alt.name, len(text))
        return text
    raise FileNotFoundError(f"Prompt file not found. Tried: {path} and {alt}")


def format_history(history: List[Any], limit: int) -> str:
    """Render the last `limit` turns as 'role: content' lines."""
    lines = []
    for msg in list(history)[-limit:] if limit > 0 else []:
        role = getattr(msg, "role", None) or (msg.get("role") if isinstance(msg, dict) else "user")
        content = getattr(msg, "content", None) or (msg.get("content") if isinstance(msg, dict) else "")
        lines.append(f"{role}: {content}")
    return "\n".join(lines)


class LLMClient:
    """
    Thin wrapper over OpenAI chat completions:
      - chat_text: freeform text output; raises on failure.
      - chat_json: JSON-mode output as a dict (.data); never raises, errors land in `__llm_error__`.
    """

    def __init__(self, model: Optional[str] = None):
        self.model = model or settings.OPENAI_MODEL
        logger.info(f"🤖 LLM Client initialized with OpenAI: {self.model}")

    def chat_text(
        self,
        messages: List[Dict[str, str]],
        timeout: int = 60,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Run a chat completion expecting plain text output."""
        try:
            content = self._complete(messages, timeout, max_tokens=max_tokens, temperature=temperature)
            logger.debug("OpenAI chat_text received %d chars", len(content))
            return content
        except (APIConnectionError, RateLimitError, BadRequestError, APIStatusError) as e:
            logger.exception("OpenAI API error in chat_text: %s", e)
            raise

    def chat_json(
        self,
        messages: List[Dict[str, str]],
        timeout: int = 90,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> _JSONResponse:
        """
        Run a chat completion that MUST return valid JSON.
        """
        try:
            raw = self._complete(
                messages, timeout, max_tokens=max_tokens, temperature=temperature, json_mode=True,
            )
        except Exception as e:
            logger.exception("OpenAI API error in chat_json: %s", e)
            return _JSONResponse(data={"__llm_error__": str(e)})

        try:
            data = self._coerce_json(raw) if raw else {}
        except json.JSONDecodeError as je:
            logger.error("JSON decode failed; returning error payload")
            data = {"__llm_error__": f"json_decode_error: {je}", "__raw__": raw, "__raw_preview__": (raw or "")[:1200]}
        logger.debug("OpenAI chat_json parsed keys: %s", list(data.keys()))
        return _JSONResponse(data=data)

    @retry_on_overload
    def _complete(
        self,
        messages: List[Dict[str, str]],
        timeout: int,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> str:
        client = _get_openai_client()
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "timeout": timeout,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if temperature is not None:
            kwargs["temperature"] = temperature
        resp = client.chat.completions.create(**kwargs)
        return (resp.choices[0].message.content or "").strip()

    @staticmethod
    def _coerce_json(text: str) -> Dict[str, Any]:
        """Best-effort JSON object parser for LLM responses.

        Tolerates markdown code fences and commentary around a single JSON object.
        """
        s = (text or "").strip()
        s = re.sub(r"^\s*```(?:json)?\s*", "", s, flags=re.IGNORECASE)
        s = re.sub(r"\s*```\s*$", "", s).strip()
        if not s:
            return {}

        try:
            obj = json.loads(s)
        except json.JSONDecodeError:
            start, end = s.find("{"), s.rfind("}")
            if start == -1 or end <= start:
                raise
            obj = json.loads(s[start : end + 1])

        if isinstance(obj, list) and len(obj) == 1 and isinstance(obj[0], dict):
            obj = obj[0]
        if not isinstance(obj, dict):
            raise json.JSONDecodeError("Expected JSON object", s, 0)
        return obj


# Shared instance; agents accept any object with the same chat_text / chat_json methods
default_llm_client = LLMClient()
