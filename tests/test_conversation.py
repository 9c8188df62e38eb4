import pytest

from sinta_reviewer.conversation import ConversationState, to_model_contents, to_model_role
from sinta_reviewer.error_handling import InputValidationError
from sinta_reviewer.models import ConversationTurn, Speaker


def test_greeting_only_gives_empty_history():
    state = ConversationState("Hello! How can I help?")
    assert len(state.turns) == 1
    assert state.to_outbound_history() == []
    assert state.to_model_contents() == []


def test_history_after_one_exchange():
    state = ConversationState("Hello!")
    question = state.add_requester("Is my abstract too long?")
    answer = state.add_responder("It is 310 words, trim it to 250.")

    assert state.to_outbound_history() == [question, answer]
    assert state.to_model_contents() == [
        {"role": "user", "parts": [{"text": "Is my abstract too long?"}]},
        {"role": "model", "parts": [{"text": "It is 310 words, trim it to 250."}]},
    ]


def test_rendering_view_keeps_greeting():
    state = ConversationState("Hello!")
    state.add_requester("Hi")
    assert [t.text for t in state.turns] == ["Hello!", "Hi"]
    assert state.turns[0].synthetic


def test_reset_clears_turns():
    state = ConversationState("Hello!")
    state.add_requester("Hi")
    state.add_responder("Hi there")
    state.reset("New topic greeting")
    assert len(state) == 1
    assert state.turns[0].text == "New topic greeting"
    assert state.to_outbound_history() == []


def test_seeded_reset_starts_history_with_requester():
    state = ConversationState()
    state.reset("Let's discuss: cats. What's your opinion?", seed_prompt="Let's discuss the topic: cats")
    contents = state.to_model_contents()
    assert [c["role"] for c in contents] == ["user", "model"]
    assert contents[0]["parts"][0]["text"] == "Let's discuss the topic: cats"
    assert len(state.turns) == 1


def test_append_rejects_non_turns():
    state = ConversationState("Hello!")
    with pytest.raises(InputValidationError):
        state.append({"role": "user", "text": "hi"})


def test_role_mapping():
    assert to_model_role(Speaker.REQUESTER) == "user"
    assert to_model_role(Speaker.RESPONDER) == "model"


def test_unmapped_role_fails_loudly():
    with pytest.raises(InputValidationError):
        to_model_role("moderator")


def test_history_starting_with_responder_rejected():
    turns = [ConversationTurn(Speaker.RESPONDER, "Hi, I am the reviewer")]
    with pytest.raises(InputValidationError):
        to_model_contents(turns)


def test_state_without_greeting_keeps_leading_responder():
    state = ConversationState()
    state.add_responder("Unprompted reply")
    with pytest.raises(InputValidationError):
        state.to_model_contents()
