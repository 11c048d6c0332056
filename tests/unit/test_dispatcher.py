"""
Tests for the multi-credential dispatcher.

Verifies:
✔ First success wins (later keys never called)
✔ Rate-limited and invalid keys fail over in pool order
✔ Any other error aborts immediately
✔ All rate-limited -> AllLimited(max(1, ceil(min(waits) + buffer)))
✔ Fallback wait when a 429 carries no timing
✔ All invalid / empty pool -> Error
"""

from dispatcher import AllLimited, CredentialPool, Dispatcher, Error, Ok
from dispatcher.dispatcher import EMPTY_RESPONSE_MESSAGE, EXHAUSTED_MESSAGE, FATAL_MESSAGE
from inference import StubModelBackend


def make_dispatcher(replies, keys=None, **kwargs):
    keys = keys or list(replies)
    backend = StubModelBackend(replies)
    pool = CredentialPool(keys=tuple(keys))
    return Dispatcher(pool, backend, **kwargs), backend


class TestFailover:
    """Credential iteration order and early exit."""

    def test_first_success_wins(self):
        dispatcher, backend = make_dispatcher({
            "k1": "connections from k1",
            "k2": RuntimeError("must not be called"),
        })

        result = dispatcher.dispatch("prompt")

        assert result == Ok(text="connections from k1")
        assert backend.calls == ["k1"]

    def test_rate_limited_then_invalid_then_success(self, provider_error):
        dispatcher, backend = make_dispatcher({
            "k1": provider_error("RESOURCE_EXHAUSTED", code=429),
            "k2": RuntimeError("API key not valid. Please pass a valid API key."),
            "k3": "connections from k3",
        })

        result = dispatcher.dispatch("prompt")

        assert result == Ok(text="connections from k3")
        assert backend.calls == ["k1", "k2", "k3"]

    def test_fatal_error_stops_immediately(self):
        dispatcher, backend = make_dispatcher({
            "k1": RuntimeError("500 INTERNAL"),
            "k2": "never reached",
        })

        result = dispatcher.dispatch("prompt")

        assert isinstance(result, Error)
        assert result.message == FATAL_MESSAGE
        assert result.detail == "500 INTERNAL"
        assert backend.calls == ["k1"]

    def test_fatal_after_rate_limit_still_stops(self, provider_error):
        dispatcher, backend = make_dispatcher({
            "k1": provider_error("limited", code=429, headers={"retry-after": "5"}),
            "k2": RuntimeError("permission denied"),
            "k3": "never reached",
        })

        result = dispatcher.dispatch("prompt")

        assert result == Error(message=FATAL_MESSAGE, detail="permission denied")
        assert backend.calls == ["k1", "k2"]

    def test_empty_text_is_an_error(self):
        dispatcher, backend = make_dispatcher({"k1": "", "k2": "never reached"})

        result = dispatcher.dispatch("prompt")

        assert result == Error(message=FATAL_MESSAGE, detail=EMPTY_RESPONSE_MESSAGE)
        assert backend.calls == ["k1"]

    def test_prompt_is_passed_through(self):
        seen = []
        dispatcher, _ = make_dispatcher({"k1": lambda req: seen.append(req.prompt) or "ok"})

        dispatcher.dispatch("exact prompt text")

        assert seen == ["exact prompt text"]


class TestAllLimited:
    """Aggregated backoff when every key is rate-limited."""

    def test_min_wait_plus_buffer(self, provider_error):
        dispatcher, backend = make_dispatcher({
            "k1": provider_error("limited", code=429, headers={"Retry-After": "5"}),
            "k2": provider_error("limited", code=429, body='{"retryDelay": "12s"}'),
            "k3": RuntimeError("Too Many Requests. Please retry in 8.2s."),
        }, retry_buffer_seconds=2)

        result = dispatcher.dispatch("prompt")

        # waits [5, 12, 9] -> min 5 + 2
        assert result == AllLimited(retry_after_seconds=7)
        assert backend.calls == ["k1", "k2", "k3"]

    def test_fallback_when_no_timing(self, provider_error):
        dispatcher, _ = make_dispatcher(
            {"k1": provider_error("limited", code=429)},
            fallback_retry_seconds=20,
            retry_buffer_seconds=2,
        )

        assert dispatcher.dispatch("prompt") == AllLimited(retry_after_seconds=22)

    def test_fallback_competes_with_explicit_waits(self, provider_error):
        dispatcher, _ = make_dispatcher({
            "k1": provider_error("limited", code=429),
            "k2": provider_error("limited", code=429, headers={"retry-after": "30"}),
        })

        # fallback 20 < 30
        assert dispatcher.dispatch("prompt") == AllLimited(retry_after_seconds=22)

    def test_fractional_wait_rounds_up(self, provider_error):
        dispatcher, _ = make_dispatcher(
            {"k1": provider_error("limited", code=429, headers={"retry-after": "0.5"})},
            retry_buffer_seconds=2,
        )

        assert dispatcher.dispatch("prompt") == AllLimited(retry_after_seconds=3)

    def test_at_least_one_second(self, provider_error):
        dispatcher, _ = make_dispatcher(
            {"k1": provider_error("limited", code=429, headers={"retry-after": "0.2"})},
            retry_buffer_seconds=0,
        )

        assert dispatcher.dispatch("prompt") == AllLimited(retry_after_seconds=1)

    def test_invalid_keys_do_not_add_waits(self, provider_error):
        dispatcher, _ = make_dispatcher({
            "k1": RuntimeError("API_KEY_INVALID"),
            "k2": provider_error("limited", code=429, headers={"retry-after": "4"}),
        })

        assert dispatcher.dispatch("prompt") == AllLimited(retry_after_seconds=6)


class TestExhaustion:
    """No usable key at all."""

    def test_all_invalid(self):
        dispatcher, backend = make_dispatcher({
            "k1": RuntimeError("API key not valid"),
            "k2": RuntimeError("API_KEY_INVALID"),
        })

        assert dispatcher.dispatch("prompt") == Error(message=EXHAUSTED_MESSAGE)
        assert backend.calls == ["k1", "k2"]

    def test_empty_pool(self):
        backend = StubModelBackend()
        dispatcher = Dispatcher(CredentialPool.from_string(""), backend)

        result = dispatcher.dispatch("prompt")

        assert isinstance(result, Error)
        assert "No API keys configured" in result.message
        assert backend.calls == []
