import asyncio

from bible_study.docs.models import DocumentSnapshot, Sermon
from bible_study.llm.base import CompletionResult, ConfigurationError, UpstreamError
from bible_study.llm.postprocess import TRUNCATION_NOTICE
from bible_study.services.chat_session import (
    ERROR_REPLY,
    ChatSession,
    clear_sessions,
    close_session,
    open_session,
)

SNAPSHOT = DocumentSnapshot(
    sermons=(Sermon(id="s1", title="Abiding in the Vine", summary="Remain in me."),),
)


class FakeService:
    def __init__(self, result=None, error=None, on_call=None):
        self.result = result or CompletionResult(
            text="- Answer.", finish_reason="STOP", usage_metadata=None, model_used="m"
        )
        self.error = error
        self.on_call = on_call
        self.calls = []

    async def complete(self, context, question):
        self.calls.append((context, question))
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.result


def test_send_runs_pipeline_and_records_history():
    service = FakeService()
    session = ChatSession(SNAPSHOT, lambda: service)

    reply = asyncio.run(session.send("  Tell me about the vine  "))

    assert reply == "- Answer."
    context, question = service.calls[0]
    assert question == "Tell me about the vine"
    assert "Abiding in the Vine" in context
    assert [(m.role, m.content) for m in session.messages] == [
        ("user", "Tell me about the vine"),
        ("assistant", "- Answer."),
    ]
    assert session.in_flight is False


def test_length_limited_reply_gets_notice():
    result = CompletionResult(text="Partial", finish_reason="MAX_TOKENS", usage_metadata=None, model_used="m")
    session = ChatSession(SNAPSHOT, lambda: FakeService(result=result))

    assert asyncio.run(session.send("vine")) == "Partial" + TRUNCATION_NOTICE


def test_upstream_failure_gives_error_reply_and_clears_flag():
    service = FakeService(error=UpstreamError("down", status_code=503))
    session = ChatSession(SNAPSHOT, lambda: service)

    assert asyncio.run(session.send("vine")) == ERROR_REPLY
    assert session.in_flight is False

    service.error = None
    assert asyncio.run(session.send("vine again")) == "- Answer."


def test_missing_configuration_gives_error_reply():
    def factory():
        raise ConfigurationError("Server AI key is not configured")

    session = ChatSession(SNAPSHOT, factory)

    assert asyncio.run(session.send("vine")) == ERROR_REPLY
    assert session.in_flight is False


def test_blank_message_is_ignored():
    service = FakeService()
    session = ChatSession(SNAPSHOT, lambda: service)

    assert asyncio.run(session.send("   ")) is None
    assert service.calls == []
    assert session.messages == []


def test_send_while_in_flight_is_ignored():
    service = FakeService()
    session = ChatSession(SNAPSHOT, lambda: service)
    session.in_flight = True

    assert asyncio.run(session.send("vine")) is None
    assert service.calls == []


def test_result_after_close_is_discarded():
    session = ChatSession(SNAPSHOT, lambda: service)
    service = FakeService(on_call=session.close)

    assert asyncio.run(session.send("vine")) is None
    assert [m.role for m in session.messages] == ["user"]
    assert session.in_flight is False


def test_replace_snapshot_swaps_documents():
    service = FakeService()
    session = ChatSession(SNAPSHOT, lambda: service)
    session.replace_snapshot(DocumentSnapshot(sermons=(Sermon(id="s2", title="Faith in the storm"),)))

    asyncio.run(session.send("faith"))

    context, _ = service.calls[0]
    assert "Faith in the storm" in context
    assert "Abiding in the Vine" not in context


def test_exchange_reports_error_and_context_size():
    error = UpstreamError("down", status_code=503)
    session = ChatSession(SNAPSHOT, lambda: FakeService(error=error))

    turn = asyncio.run(session.exchange("vine"))

    assert turn.reply == ERROR_REPLY
    assert turn.error is error
    assert turn.result is None
    assert turn.context_char_count > 0


class TestSessionRegistry:
    def teardown_method(self):
        clear_sessions()

    def test_same_user_gets_same_session_with_fresh_snapshot(self):
        first = open_session("u1", SNAPSHOT, FakeService)
        fresh = DocumentSnapshot(sermons=(Sermon(id="s2", title="Faith in the storm"),))

        second = open_session("u1", fresh, FakeService)

        assert second is first
        assert second.snapshot is fresh

    def test_anonymous_sessions_are_not_shared(self):
        assert open_session(None, SNAPSHOT, FakeService) is not open_session(None, SNAPSHOT, FakeService)

    def test_close_session_discards_and_closes(self):
        session = open_session("u1", SNAPSHOT, FakeService)

        assert close_session("u1") is True
        assert session.closed is True
        assert close_session("u1") is False
        assert open_session("u1", SNAPSHOT, FakeService) is not session
