import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .conversation import ConversationState
from .error_handling import InputValidationError
from .models import ConversationTurn
from .prompts import (build_debate_greeting, build_debate_opener, build_debate_topic_prompt, build_grammar_prompt,
                      build_pronunciation_analysis_prompt, build_pronunciation_text_prompt,
                      build_tutor_system_instruction)
from .response_parser import clean_debate_topic
from .utils.config import DEFAULT_PROFILES, GenerationProfile
from .utils.text_generation import GeminiClient, InlineAttachment

logger = logging.getLogger(__name__)


class LanguageTutor:
    def __init__(self, client: GeminiClient, profiles: Optional[Dict[str, GenerationProfile]] = None):
        self.client = client
        self.profiles = profiles or DEFAULT_PROFILES

    def _profile(self, task: str) -> GenerationProfile:
        return self.profiles.get(task, GenerationProfile())

    async def generate_debate_topic(self) -> str:
        raw = await self.client.complete(build_debate_topic_prompt(), profile=self._profile("debate_topic"))
        return clean_debate_topic(raw)

    async def generate_pronunciation_text(self) -> str:
        raw = await self.client.complete(
            build_pronunciation_text_prompt(), profile=self._profile("pronunciation_text")
        )
        return raw.strip()

    async def analyze_pronunciation(self, original_text: str, audio_base64: str) -> str:
        prompt = build_pronunciation_analysis_prompt(original_text)
        if not audio_base64:
            raise InputValidationError("Audio data must not be empty")
        return await self.client.complete_multimodal(
            prompt,
            InlineAttachment("audio/mp3", audio_base64),
            profile=self._profile("pronunciation_analysis"),
        )

    async def analyze_grammar(self, user_message: str, context: str = "") -> str:
        prompt = build_grammar_prompt(user_message, context)
        return await self.client.complete(prompt, profile=self._profile("grammar"))

    async def chat(self, history: Iterable[ConversationTurn], message: str) -> str:
        return await self.client.chat(
            build_tutor_system_instruction(),
            history,
            message,
            profile=self._profile("tutor_chat"),
        )


@dataclass(frozen=True)
class DebateReply:
    reply: str
    grammar_feedback: str


class DebateSession:
    """Debate practice: a generated topic, a chat partner and grammar feedback per message"""

    def __init__(self, tutor: LanguageTutor):
        self.tutor = tutor
        self.topic: Optional[str] = None
        self.conversation = ConversationState()
        self._pending = False

    async def new_topic(self) -> str:
        if self._pending:
            raise InputValidationError("A request is already in flight for this session")
        self._pending = True
        try:
            topic = await self.tutor.generate_debate_topic()
        finally:
            self._pending = False

        self.start(topic)
        logger.info(f"New debate topic: {topic}")
        return topic

    def start(self, topic: str) -> None:
        self.topic = topic
        self.conversation.reset(build_debate_greeting(topic), seed_prompt=build_debate_opener(topic))

    async def send(self, message: str) -> DebateReply:
        if self.topic is None:
            raise InputValidationError("Start a debate topic before sending messages")
        if self._pending:
            raise InputValidationError("A request is already in flight for this session")
        if not message or not message.strip():
            raise InputValidationError("Message must not be empty")

        self._pending = True
        try:
            grammar = await self.tutor.analyze_grammar(message, self.topic)
            reply = await self.tutor.chat(self.conversation.to_outbound_history(), message)
        finally:
            self._pending = False

        self.conversation.add_requester(message)
        self.conversation.add_responder(reply)
        return DebateReply(reply=reply, grammar_feedback=grammar)
