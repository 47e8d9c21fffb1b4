"""ConversationContext: bounded history, payload windows and enrichment."""
from __future__ import annotations

import pytest

from pagechat.base.constants import CONTINUATION_INSTRUCTION, DEFAULT_MODE
from pagechat.base.context import ContextLimits, ConversationContext
from pagechat.base.context.instructions import CORE_INSTRUCTIONS
from pagechat.base.models import ChatPayload, Turn


def _fill(ctx: ConversationContext, pairs: int) -> None:
    for i in range(pairs):
        ctx.record_turn("user", f"question {i}")
        ctx.record_turn("assistant", f"answer {i}")


def test_history_is_bounded_and_evicts_oldest_first(log_events):
    ctx = ConversationContext()
    for i in range(45):
        ctx.record_turn("user" if i % 2 == 0 else "assistant", f"message {i}")
    history = ctx.history
    assert len(history) == 40  # nosec B101
    assert [t.content for t in history] == [f"message {i}" for i in range(5, 45)]  # nosec B101
    assert ctx.turn_count == 45  # nosec B101
    assert log_events.named("context.evict")  # nosec B101


def test_blank_turns_are_not_recorded():
    ctx = ConversationContext()
    assert ctx.record_turn("user", "   ") is None  # nosec B101
    assert ctx.record(Turn.finalized("assistant", "")) is None  # nosec B101
    assert len(ctx) == 0  # nosec B101


def test_recording_an_unfinalized_turn_is_rejected():
    ctx = ConversationContext()
    with pytest.raises(ValueError):
        ctx.record(Turn(role="assistant", content="still streaming"))


def test_payload_window_holds_at_most_twelve_entries_plus_new_message():
    ctx = ConversationContext()
    _fill(ctx, 10)
    payload = ctx.build_payload("next question")
    assert isinstance(payload, ChatPayload)  # nosec B101
    assert len(payload.messages) == 13  # nosec B101
    assert payload.messages[0].content == "question 4"  # nosec B101
    assert payload.messages[-1].content == "next question"  # nosec B101


def test_payload_carries_whole_history_when_short():
    ctx = ConversationContext()
    _fill(ctx, 2)
    payload = ctx.build_payload("and then?")
    assert len(payload.messages) == len(ctx.history) + 1  # nosec B101
    assert [m.role for m in payload.messages] == ["user", "assistant", "user", "assistant", "user"]  # nosec B101


def test_first_message_gets_full_page_block(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    payload = ctx.build_payload("Explain this page")
    assert len(payload.messages) == 1  # nosec B101
    assert payload.messages[0].content == (  # nosec B101
        "[Page Context]\nTitle: Repo X\nURL: u\nType: GitHub Analysis\n\n"
        "Page Content:\ne\n\n---\nExplain this page"
    )
    assert payload.mode == "GitHub Analysis"  # nosec B101
    assert payload.system_instructions.startswith(CORE_INSTRUCTIONS)  # nosec B101
    assert "a source repository" in payload.system_instructions  # nosec B101


def test_page_query_later_gets_back_reference_only(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    ctx.record_turn("user", "Explain this page")
    ctx.record_turn("assistant", "It is a repository for X.")
    text = "What about performance?"
    assert ctx.is_follow_up(text)  # nosec B101
    payload = ctx.build_payload(text)
    assert payload.messages[-1].content == "[Referring to: Repo X]\nWhat about performance?"  # nosec B101
    assert "Page Content" not in payload.messages[-1].content  # nosec B101


def test_unrelated_message_is_sent_verbatim(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    _fill(ctx, 1)
    payload = ctx.build_payload("Thanks a lot!")
    assert payload.messages[-1].content == "Thanks a lot!"  # nosec B101


def test_hints_are_appended_to_system_instructions():
    ctx = ConversationContext()
    payload = ctx.build_payload("hi", hints=["\n[CONVERSATION CONTEXT: be brief]", ""])
    assert payload.system_instructions.endswith("\n[CONVERSATION CONTEXT: be brief]")  # nosec B101
    assert payload.mode == DEFAULT_MODE  # nosec B101


def test_explicit_mode_overrides_page_mode(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    assert ctx.build_payload("x", mode="Research Paper").mode == "Research Paper"  # nosec B101


def test_resend_does_not_duplicate_last_user_message():
    ctx = ConversationContext()
    _fill(ctx, 1)
    ctx.record_turn("user", "retry me")
    payload = ctx.build_payload("retry me", resend=True)
    contents = [m.content for m in payload.messages]
    assert contents == ["question 0", "answer 0", "retry me"]  # nosec B101


def test_continuation_payload_shape(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    _fill(ctx, 5)
    payload = ctx.build_continuation_payload("and then we")
    assert payload.system_instructions == CORE_INSTRUCTIONS  # nosec B101
    assert payload.mode == "GitHub Analysis"  # nosec B101
    assert len(payload.messages) == 6  # nosec B101
    assert [m.content for m in payload.messages[:4]] == ["question 3", "answer 3", "question 4", "answer 4"]  # nosec B101
    assert payload.messages[4].role == "assistant" and payload.messages[4].content == "and then we"  # nosec B101
    assert payload.messages[5].role == "user"  # nosec B101
    assert payload.messages[5].content == CONTINUATION_INSTRUCTION  # nosec B101
    assert all("Page Content" not in m.content for m in payload.messages)  # nosec B101


def test_payload_builders_do_not_mutate_history():
    ctx = ConversationContext()
    _fill(ctx, 3)
    before = ctx.history
    ctx.build_payload("anything")
    ctx.build_continuation_payload("partial")
    assert ctx.history == before  # nosec B101


def test_custom_limits_apply():
    ctx = ConversationContext(ContextLimits(history_limit=4, window_size=2, continuation_window=1))
    _fill(ctx, 3)
    assert len(ctx.history) == 4  # nosec B101
    assert len(ctx.build_payload("x").messages) == 3  # nosec B101
    assert len(ctx.build_continuation_payload().messages) == 2  # nosec B101


def test_limits_are_validated():
    with pytest.raises(ValueError):
        ContextLimits(history_limit=5, window_size=6)


def test_follow_up_needs_history():
    ctx = ConversationContext()
    assert not ctx.is_follow_up("why?")  # nosec B101
    _fill(ctx, 1)
    assert ctx.is_follow_up("why?")  # nosec B101
    assert not ctx.is_follow_up("Please describe the deployment process used by this project in detail")  # nosec B101
    assert ctx.is_follow_up("Could you describe the deployment process used by this project in detail")  # nosec B101


def test_recap_offer_and_text():
    ctx = ConversationContext()
    assert ctx.generate_recap() == ""  # nosec B101
    _fill(ctx, 10)
    assert ctx.should_offer_recap()  # nosec B101
    recap = ctx.generate_recap()
    assert recap.startswith("Conversation recap (20 messages):")  # nosec B101
    assert recap.count("\n") == 5  # nosec B101
    assert "1. question 0" in recap  # nosec B101


def test_last_messages_and_clear(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    _fill(ctx, 2)
    assert ctx.last_user_message() == "question 1"  # nosec B101
    assert ctx.last_assistant_message() == "answer 1"  # nosec B101
    ctx.clear()
    assert len(ctx) == 0 and ctx.turn_count == 0  # nosec B101
    assert ctx.page_context is not None  # nosec B101
    ctx.reset()
    assert ctx.page_context is None  # nosec B101


def test_navigation_replaces_page_wholesale(page_payload):
    ctx = ConversationContext()
    ctx.update_page_context(page_payload)
    ctx.update_page_context({"title": "Docs", "url": "d"})
    page = ctx.page_context
    assert page.title == "Docs" and page.excerpt == "" and page.mode == DEFAULT_MODE  # nosec B101
    assert ctx.update_page_context(None) is page  # nosec B101
