from bible_study.llm.base import CompletionResult
from bible_study.llm.postprocess import (
    FALLBACK_MESSAGE,
    TRUNCATION_NOTICE,
    extract_finish_reason,
    extract_text,
    extract_usage,
    render_reply,
)


class TestExtractText:
    def test_concatenates_all_parts_of_first_candidate(self):
        payload = {
            "candidates": [
                {"content": {"parts": [{"text": "- one\n"}, {"text": "- two"}]}},
                {"content": {"parts": [{"text": "ignored"}]}},
            ]
        }
        assert extract_text(payload) == "- one\n- two"

    def test_skips_non_text_parts(self):
        payload = {"candidates": [{"content": {"parts": [{"inlineData": {}}, {"text": 3}, {"text": " ok "}]}}]}
        assert extract_text(payload) == "ok"

    def test_malformed_payloads_fall_back(self):
        for payload in (
            None,
            [],
            "text",
            {},
            {"candidates": None},
            {"candidates": []},
            {"candidates": ["bad"]},
            {"candidates": [{"content": None}]},
            {"candidates": [{"content": {"parts": "nope"}}]},
            {"candidates": [{"content": {"parts": [{"text": "   "}]}}]},
        ):
            assert extract_text(payload) == FALLBACK_MESSAGE


def test_finish_reason_and_usage_tolerate_bad_shapes():
    assert extract_finish_reason({"candidates": [{"finishReason": "MAX_TOKENS"}]}) == "MAX_TOKENS"
    assert extract_finish_reason({"candidates": [{}]}) is None
    assert extract_finish_reason(None) is None
    assert extract_usage({"usageMetadata": {"totalTokenCount": 9}}) == {"totalTokenCount": 9}
    assert extract_usage({"usageMetadata": "x"}) is None


class TestRenderReply:
    def test_appends_notice_on_length_limit(self):
        result = CompletionResult(text="Partial", finish_reason="MAX_TOKENS", usage_metadata=None, model_used="m")
        assert render_reply(result) == "Partial" + TRUNCATION_NOTICE

    def test_normal_stop_unchanged(self):
        result = CompletionResult(text="Done", finish_reason="STOP", usage_metadata=None, model_used="m")
        assert render_reply(result) == "Done"

    def test_empty_text_uses_fallback(self):
        result = CompletionResult(text="", finish_reason=None, usage_metadata=None, model_used="m")
        assert render_reply(result) == FALLBACK_MESSAGE
