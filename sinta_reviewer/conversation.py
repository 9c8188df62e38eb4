import logging
from typing import Dict, Iterable, List, Optional

from .error_handling import InputValidationError
from .models import ConversationTurn, Speaker

logger = logging.getLogger(__name__)

# Gemini only knows two roles. A new Speaker must be added here or
# to_model_role fails loudly.
MODEL_ROLES: Dict[Speaker, str] = {
    Speaker.REQUESTER: "user",
    Speaker.RESPONDER: "model",
}


def to_model_role(speaker: Speaker) -> str:
    try:
        return MODEL_ROLES[speaker]
    except KeyError:
        raise InputValidationError(f"No model role mapped for speaker {speaker!r}")


def to_model_contents(turns: Iterable[ConversationTurn]) -> List[Dict]:
    """Map turns to the {role, parts} history format, requester first"""
    turns = list(turns)
    if turns and turns[0].speaker is not Speaker.REQUESTER:
        raise InputValidationError("Chat history must start with a requester turn")
    return [
        {"role": to_model_role(turn.speaker), "parts": [{"text": turn.text}]}
        for turn in turns
    ]


class ConversationState:
    """Ordered turns of one chat session.

    The first turn is usually a synthetic greeting shown to the user but kept
    out of the outbound history. When a seed prompt is given the greeting is
    sent after it, so the remote session still opens on the requester side.
    """

    def __init__(self, greeting: Optional[str] = None, seed_prompt: Optional[str] = None):
        self._turns: List[ConversationTurn] = []
        self._seed: Optional[ConversationTurn] = None
        if greeting:
            self.reset(greeting, seed_prompt=seed_prompt)

    @property
    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def __len__(self):
        return len(self._turns)

    def append(self, turn: ConversationTurn) -> ConversationTurn:
        if not isinstance(turn, ConversationTurn):
            raise InputValidationError(f"Expected ConversationTurn, got {type(turn).__name__}")
        self._turns.append(turn)
        return turn

    def add_requester(self, text: str) -> ConversationTurn:
        return self.append(ConversationTurn(Speaker.REQUESTER, text))

    def add_responder(self, text: str) -> ConversationTurn:
        return self.append(ConversationTurn(Speaker.RESPONDER, text))

    def reset(self, greeting: str, seed_prompt: Optional[str] = None) -> None:
        self._turns = [ConversationTurn(Speaker.RESPONDER, greeting, synthetic=True)]
        self._seed = ConversationTurn(Speaker.REQUESTER, seed_prompt, synthetic=True) if seed_prompt else None
        logger.info("Conversation reset")

    def to_outbound_history(self) -> List[ConversationTurn]:
        turns = list(self._turns)
        if turns and turns[0].synthetic and turns[0].speaker is Speaker.RESPONDER:
            greeting = turns.pop(0)
            if self._seed is not None:
                return [self._seed, greeting] + turns
        return turns

    def to_model_contents(self) -> List[Dict]:
        return to_model_contents(self.to_outbound_history())
