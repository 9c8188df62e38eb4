import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from .conversation import ConversationState
from .documents import read_pdf_base64
from .error_handling import InputValidationError
from .models import AnalysisResult, ChecklistResult, ConversationTurn
from .prompts import (AttachmentKind, build_analysis_prompt, build_chat_system_instruction,
                      build_checklist_prompt, build_reviewer_greeting, build_section_improvement_prompt,
                      build_text_extraction_prompt)
from .response_parser import parse_analysis_result, parse_checklist_result
from .utils.config import DEFAULT_PROFILES, GenerationProfile
from .utils.text_generation import GeminiClient, InlineAttachment

logger = logging.getLogger(__name__)


class SintaReviewer:
    def __init__(self, client: GeminiClient, profiles: Optional[Dict[str, GenerationProfile]] = None):
        self.client = client
        self.profiles = profiles or DEFAULT_PROFILES

    def _profile(self, task: str) -> GenerationProfile:
        return self.profiles.get(task, GenerationProfile())

    async def analyze_image(self, base64_image: str) -> AnalysisResult:
        """OCR and assess a photographed journal page"""
        if not base64_image:
            raise InputValidationError("Image data must not be empty")
        logger.info("Analyzing journal from image")
        raw = await self.client.complete_multimodal(
            build_analysis_prompt(AttachmentKind.IMAGE),
            InlineAttachment("image/jpeg", base64_image),
            profile=self._profile("image_analysis"),
        )
        return parse_analysis_result(raw)

    async def analyze_pdf(self, pdf_path: Union[str, Path]) -> AnalysisResult:
        """Assess a complete journal PDF"""
        pdf_base64 = await asyncio.to_thread(read_pdf_base64, pdf_path)
        logger.info(f"Analyzing journal from PDF {pdf_path}")
        raw = await self.client.complete_multimodal(
            build_analysis_prompt(AttachmentKind.PDF),
            InlineAttachment("application/pdf", pdf_base64),
            profile=self._profile("pdf_analysis"),
        )
        return parse_analysis_result(raw)

    async def extract_text(self, base64_image: str) -> str:
        if not base64_image:
            raise InputValidationError("Image data must not be empty")
        return await self.client.complete_multimodal(
            build_text_extraction_prompt(),
            InlineAttachment("image/jpeg", base64_image),
            profile=self._profile("text_extraction"),
        )

    async def improve_section(self, section: str, current_text: str) -> str:
        prompt = build_section_improvement_prompt(section, current_text)
        logger.info(f"Requesting improvement for section {section}")
        return await self.client.complete(prompt, profile=self._profile("section_improvement"))

    async def check_requirements(self, journal_text: str) -> ChecklistResult:
        prompt = build_checklist_prompt(journal_text)
        raw = await self.client.complete(prompt, profile=self._profile("checklist"))
        result = parse_checklist_result(raw)
        logger.info(f"Checklist: {result.passed_count}/{result.total_count} passed")
        return result

    async def chat(self, journal_context: str, history: Iterable[ConversationTurn], message: str) -> str:
        return await self.client.chat(
            build_chat_system_instruction(journal_context),
            history,
            message,
            profile=self._profile("reviewer_chat"),
        )


class ReviewerSession:
    """Reviewer chat bound to one analysed journal.

    Only one request may be in flight; the user turn and the reply are
    recorded together once the reply arrives.
    """

    def __init__(self, reviewer: SintaReviewer, journal_context: str, initial_analysis: str = ""):
        if not journal_context or not journal_context.strip():
            raise InputValidationError("Journal context must not be empty")
        self.reviewer = reviewer
        self.journal_context = journal_context
        self.conversation = ConversationState(build_reviewer_greeting(initial_analysis))
        self._pending = False

    @classmethod
    def from_analysis(cls, reviewer: SintaReviewer, title: str, analysis: AnalysisResult) -> 'ReviewerSession':
        context = f"Journal title: {title}. {analysis.summary()}"
        if analysis.weaknesses:
            context += " Weaknesses: " + "; ".join(analysis.weaknesses)
        return cls(reviewer, context, initial_analysis=analysis.summary())

    @property
    def busy(self) -> bool:
        return self._pending

    async def send(self, message: str) -> str:
        if self._pending:
            raise InputValidationError("A request is already in flight for this session")
        if not message or not message.strip():
            raise InputValidationError("Message must not be empty")

        self._pending = True
        try:
            history = self.conversation.to_outbound_history()
            reply = await self.reviewer.chat(self.journal_context, history, message)
        finally:
            self._pending = False

        self.conversation.add_requester(message)
        self.conversation.add_responder(reply)
        return reply

    def reset(self, initial_analysis: str = "") -> None:
        self.conversation.reset(build_reviewer_greeting(initial_analysis))
