import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import httpx

from ..conversation import to_model_contents
from ..error_handling import ConfigurationError, InputValidationError, ModelInvocationError
from ..models import ConversationTurn
from .api_error_handler import handle_http_error
from .config import DEFAULT_BASE_URL, DEFAULT_MODEL, Config, GenerationProfile

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = ("image/jpeg", "application/pdf", "audio/mp3")


@dataclass(frozen=True)
class InlineAttachment:
    mime_type: str
    data: str  # base64

    def __post_init__(self):
        if self.mime_type not in SUPPORTED_MIME_TYPES:
            raise InputValidationError(f"Unsupported attachment type: {self.mime_type}")
        if not self.data:
            raise InputValidationError("Attachment data must not be empty")

    def to_part(self) -> Dict:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


class GeminiClient:
    """One request per call to the Gemini generateContent endpoint.

    No retries: every failure surfaces as a single ModelInvocationError.
    Chat state lives entirely in the history the caller passes in.
    """

    def __init__(self, *, api_key: str, model: str = DEFAULT_MODEL, base_url: str = DEFAULT_BASE_URL,
                 timeout: float = 60.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not api_key:
            logger.warning("Gemini API key not found, refusing to create client")
            raise ConfigurationError("GEMINI_API_KEY is not set")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None) -> 'GeminiClient':
        config.validate()
        return cls(
            api_key=config.gemini_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def complete(self, prompt: str, profile: Optional[GenerationProfile] = None) -> str:
        """Single-turn text request"""
        self._check_prompt(prompt)
        contents = [{"role": "user", "parts": [{"text": prompt}]}]
        return await self._generate(contents, profile=profile)

    async def complete_multimodal(self, prompt: str, attachment: InlineAttachment,
                                  profile: Optional[GenerationProfile] = None) -> str:
        """Single-turn request carrying one inline binary attachment"""
        self._check_prompt(prompt)
        if not isinstance(attachment, InlineAttachment):
            raise InputValidationError("complete_multimodal requires an InlineAttachment")
        contents = [{"role": "user", "parts": [{"text": prompt}, attachment.to_part()]}]
        return await self._generate(contents, profile=profile)

    async def chat(self, system_instruction: str, prior_turns: Iterable[ConversationTurn], new_message: str,
                   profile: Optional[GenerationProfile] = None) -> str:
        """Send new_message into a session pre-seeded with prior_turns"""
        self._check_prompt(new_message)
        history = to_model_contents(prior_turns)
        contents = history + [{"role": "user", "parts": [{"text": new_message}]}]
        return await self._generate(contents, profile=profile, system_instruction=system_instruction)

    def complete_sync(self, prompt: str, profile: Optional[GenerationProfile] = None) -> str:
        return asyncio.run(self.complete(prompt, profile=profile))

    def complete_multimodal_sync(self, prompt: str, attachment: InlineAttachment,
                                 profile: Optional[GenerationProfile] = None) -> str:
        return asyncio.run(self.complete_multimodal(prompt, attachment, profile=profile))

    def chat_sync(self, system_instruction: str, prior_turns: Iterable[ConversationTurn], new_message: str,
                  profile: Optional[GenerationProfile] = None) -> str:
        return asyncio.run(self.chat(system_instruction, prior_turns, new_message, profile=profile))

    def _check_prompt(self, prompt: str):
        if not isinstance(prompt, str) or not prompt.strip():
            raise InputValidationError("Prompt text must not be empty")

    def build_payload(self, contents: List[Dict], profile: Optional[GenerationProfile] = None,
                      system_instruction: Optional[str] = None) -> Dict:
        payload = {"contents": contents}
        generation_config = profile.to_generation_config() if profile else {}
        if generation_config:
            payload["generationConfig"] = generation_config
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    async def _generate(self, contents: List[Dict], profile: Optional[GenerationProfile] = None,
                        system_instruction: Optional[str] = None) -> str:
        payload = self.build_payload(contents, profile=profile, system_instruction=system_instruction)
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        logger.info(f"Calling {self.model} with {len(contents)} content block(s)")

        timeout = httpx.Timeout(self.timeout, connect=10.0)
        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.endpoint, json=payload, headers=headers)
                logger.info(f"API Response Status: {response.status_code}")
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise handle_http_error(e) from e

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            logger.error(f"Undecodable response body: {response.text[:500]}")
            raise ModelInvocationError(
                "Gemini API returned a non-JSON body", response.status_code, response.text
            ) from e

        return self._extract_text(data, response)

    def _malformed(self, detail: str, response: httpx.Response) -> ModelInvocationError:
        message = f"Gemini API returned a malformed body: {detail}"
        logger.error(message)
        return ModelInvocationError(message, response.status_code, response.text)

    def _extract_text(self, data: Dict, response: httpx.Response) -> str:
        if not isinstance(data, dict):
            raise self._malformed(f"expected an object, got {type(data).__name__}", response)

        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise self._malformed("'candidates' is not a list", response)
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            message = f"Gemini API returned no candidates (blockReason: {block_reason})"
            logger.error(message)
            raise ModelInvocationError(message, response.status_code, response.text)

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise self._malformed("candidate is not an object", response)
        content = candidate.get("content") or {}
        if not isinstance(content, dict):
            raise self._malformed("candidate content is not an object", response)
        parts = content.get("parts") or []
        if not isinstance(parts, list) or not all(isinstance(part, dict) for part in parts):
            raise self._malformed("candidate content has no list of parts", response)

        texts = [part.get("text") or "" for part in parts]
        if not all(isinstance(text, str) for text in texts):
            raise self._malformed("part text is not a string", response)
        text = "".join(texts)
        if not text:
            finish_reason = candidate.get("finishReason")
            message = f"Gemini API returned an empty reply (finishReason: {finish_reason})"
            logger.error(message)
            raise ModelInvocationError(message, response.status_code, response.text)
        return text
