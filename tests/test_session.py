"""Tests for streaming sessions."""

import httpx
import pytest
from conftest import ManualHTTPSession, chat_chunk, chunked, sse_body

from openai_sdk import (
    APIError,
    ChatStreamResult,
    DecodeError,
    SessionState,
    StreamingSession,
    ThreadedHTTPSession,
    TransportError,
)

STREAM_URL = "http://localhost:3100/v1/chat/completions"


class Recorder:
    """Collects every callback a session makes, in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def attach(self, session: StreamingSession) -> StreamingSession:
        session.on_receive_content = lambda s, value: self.events.append(("content", value))
        session.on_processing_error = lambda s, error: self.events.append(("error", error))
        session.on_complete = lambda s, error: self.events.append(("complete", error))
        return session

    def contents(self) -> list[str]:
        return [value.choices[0].delta.content for kind, value in self.events if kind == "content"]

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]


def _manual_session(manual_session: ManualHTTPSession, recorder: Recorder) -> StreamingSession:
    request = httpx.Request("POST", STREAM_URL)
    session = recorder.attach(StreamingSession(request, ChatStreamResult, manual_session))
    session.perform()
    return session


def _run_stream(response_factory, recorder: Recorder) -> StreamingSession:
    http_session = ThreadedHTTPSession(transport=httpx.MockTransport(response_factory))
    try:
        request = httpx.Request("POST", STREAM_URL)
        session = recorder.attach(StreamingSession(request, ChatStreamResult, http_session))
        session.perform()
        assert session.wait(timeout=5)
        return session
    finally:
        http_session.close()


class TestStreamingSession:
    def test_frames_delivered_in_order(self):
        recorder = Recorder()
        body = sse_body([chat_chunk("Hello"), chat_chunk(", "), chat_chunk("world!")])

        session = _run_stream(lambda request: httpx.Response(200, content=body), recorder)

        assert recorder.contents() == ["Hello", ", ", "world!"]
        assert recorder.events[-1] == ("complete", None)
        assert recorder.kinds().count("complete") == 1
        assert session.state is SessionState.COMPLETED

    def test_frames_split_across_chunks(self):
        recorder = Recorder()
        body = sse_body([chat_chunk("alpha"), chat_chunk("beta"), chat_chunk("gamma")])

        _run_stream(
            lambda request: httpx.Response(200, content=chunked(body, 7)),
            recorder,
        )

        assert recorder.contents() == ["alpha", "beta", "gamma"]
        assert recorder.kinds() == ["content", "content", "content", "complete"]

    def test_malformed_frame_does_not_end_stream(self):
        recorder = Recorder()
        body = sse_body([chat_chunk("one"), '{"not": "a chunk"', chat_chunk("two")])

        _run_stream(lambda request: httpx.Response(200, content=body), recorder)

        assert recorder.kinds() == ["content", "error", "content", "complete"]
        error = recorder.events[1][1]
        assert isinstance(error, DecodeError)
        assert error.raw_text == '{"not": "a chunk"'
        assert recorder.contents() == ["one", "two"]
        assert recorder.events[-1] == ("complete", None)

    def test_error_frame_reported_as_api_error(self):
        recorder = Recorder()
        body = sse_body(
            [chat_chunk("partial"), {"error": {"message": "overloaded", "type": "server_error"}}]
        )

        _run_stream(lambda request: httpx.Response(200, content=body), recorder)

        assert recorder.kinds() == ["content", "error", "complete"]
        assert isinstance(recorder.events[1][1], APIError)
        assert str(recorder.events[1][1]) == "overloaded"

    def test_sentinel_not_forwarded(self):
        recorder = Recorder()
        body = sse_body([chat_chunk("x")], done="[done]")

        _run_stream(lambda request: httpx.Response(200, content=body), recorder)

        assert recorder.kinds() == ["content", "complete"]

    def test_empty_stream(self):
        recorder = Recorder()

        _run_stream(lambda request: httpx.Response(200, content=b""), recorder)

        assert recorder.events == [("complete", None)]

    def test_http_error_status_is_terminal(self):
        recorder = Recorder()
        payload = {"error": {"message": "Invalid API key", "code": "invalid_api_key"}}

        _run_stream(lambda request: httpx.Response(401, json=payload), recorder)

        assert recorder.kinds() == ["complete"]
        error = recorder.events[0][1]
        assert isinstance(error, APIError)
        assert error.code == "invalid_api_key"
        assert error.status_code == 401

    def test_http_error_status_without_payload(self):
        recorder = Recorder()

        _run_stream(lambda request: httpx.Response(500, text="Internal Server Error"), recorder)

        error = recorder.events[0][1]
        assert isinstance(error, TransportError)
        assert error.status_code == 500

    def test_transport_failure_mid_stream(self):
        recorder = Recorder()

        def body():
            yield sse_body([chat_chunk("before")], done=None)
            raise httpx.ReadError("connection reset")

        _run_stream(lambda request: httpx.Response(200, content=body()), recorder)

        assert recorder.contents() == ["before"]
        assert recorder.kinds() == ["content", "complete"]
        assert isinstance(recorder.events[-1][1], TransportError)

    def test_connection_failure(self):
        recorder = Recorder()

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        _run_stream(handler, recorder)

        assert recorder.kinds() == ["complete"]
        assert isinstance(recorder.events[0][1], TransportError)

    def test_callback_exception_does_not_break_session(self):
        recorder = Recorder()
        body = sse_body([chat_chunk("a"), chat_chunk("b")])
        http_session = ThreadedHTTPSession(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        )
        try:
            session = recorder.attach(
                StreamingSession(httpx.Request("POST", STREAM_URL), ChatStreamResult, http_session)
            )

            def explode(s, value):
                recorder.events.append(("content", value))
                raise RuntimeError("consumer bug")

            session.on_receive_content = explode
            session.perform()
            assert session.wait(timeout=5)
        finally:
            http_session.close()

        assert recorder.kinds() == ["content", "content", "complete"]

    def test_json_error_body_is_terminal(self):
        recorder = Recorder()
        payload = b'{"error": {"message": "model overloaded", "type": "server_error"}}'

        _run_stream(lambda request: httpx.Response(200, content=payload), recorder)

        assert recorder.kinds() == ["complete"]
        error = recorder.events[0][1]
        assert isinstance(error, APIError)
        assert str(error) == "model overloaded"

    def test_html_body_is_terminal(self):
        recorder = Recorder()
        page = b"<html><body><h1>502 Bad Gateway</h1></body></html>\n"

        _run_stream(lambda request: httpx.Response(200, content=page), recorder)

        assert recorder.kinds() == ["complete"]
        error = recorder.events[0][1]
        assert isinstance(error, DecodeError)
        assert "502 Bad Gateway" in error.raw_text

    def test_unexpected_worker_failure_is_terminal(self):
        recorder = Recorder()

        def handler(request: httpx.Request) -> httpx.Response:
            raise ValueError("broken transport")

        _run_stream(handler, recorder)

        assert recorder.kinds() == ["complete"]
        assert isinstance(recorder.events[0][1], TransportError)

    def test_closed_http_session_completes_with_error(self):
        recorder = Recorder()
        http_session = ThreadedHTTPSession(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        http_session.close()
        session = recorder.attach(
            StreamingSession(httpx.Request("POST", STREAM_URL), ChatStreamResult, http_session)
        )

        session.perform()

        assert session.wait(timeout=0)
        assert session.state is SessionState.COMPLETED
        assert recorder.kinds() == ["complete"]
        assert isinstance(recorder.events[0][1], TransportError)


class TestSessionLifecycle:
    def test_states(self, manual_session: ManualHTTPSession):
        recorder = Recorder()
        request = httpx.Request("POST", STREAM_URL)
        session = recorder.attach(StreamingSession(request, ChatStreamResult, manual_session))

        assert session.state is SessionState.CREATED
        session.perform()
        assert session.state is SessionState.RUNNING
        manual_session.streams[0].on_complete(None)
        assert session.state is SessionState.COMPLETED
        assert session.wait(timeout=0)

    def test_perform_twice(self, manual_session: ManualHTTPSession):
        session = _manual_session(manual_session, Recorder())

        with pytest.raises(RuntimeError):
            session.perform()
        assert len(manual_session.streams) == 1

    def test_completion_fires_once(self, manual_session: ManualHTTPSession):
        recorder = Recorder()
        _manual_session(manual_session, recorder)
        stream = manual_session.streams[0]

        stream.on_complete(None)
        stream.on_complete(httpx.ReadError("late"))

        assert recorder.events == [("complete", None)]

    def test_no_callbacks_after_completion(self, manual_session: ManualHTTPSession):
        recorder = Recorder()
        _manual_session(manual_session, recorder)
        stream = manual_session.streams[0]

        stream.on_chunk(sse_body([chat_chunk("kept")], done=None))
        stream.on_complete(None)
        stream.on_chunk(sse_body([chat_chunk("late"), "garbage"], done=None))

        assert recorder.kinds() == ["content", "complete"]
        assert recorder.contents() == ["kept"]

    def test_pending_frame_flushed_on_completion(self, manual_session: ManualHTTPSession):
        recorder = Recorder()
        _manual_session(manual_session, recorder)
        stream = manual_session.streams[0]

        body = sse_body([chat_chunk("tail")], done=None).rstrip(b"\n")
        stream.on_chunk(body)
        assert recorder.events == []
        stream.on_complete(None)

        assert recorder.kinds() == ["content", "complete"]

    def test_pending_frame_dropped_on_transport_error(self, manual_session: ManualHTTPSession):
        recorder = Recorder()
        _manual_session(manual_session, recorder)
        stream = manual_session.streams[0]

        stream.on_chunk(b'data: {"id": "trunc')
        stream.on_complete(httpx.ReadError("reset"))

        assert recorder.kinds() == ["complete"]
        assert isinstance(recorder.events[0][1], TransportError)

    def test_session_ids_are_unique(self, manual_session: ManualHTTPSession):
        request = httpx.Request("POST", STREAM_URL)
        ids = {
            StreamingSession(request, ChatStreamResult, manual_session).session_id
            for _ in range(50)
        }
        assert len(ids) == 50

    def test_flushed_frame_callback_can_reenter_session(self, manual_session: ManualHTTPSession):
        recorder = Recorder()
        session = _manual_session(manual_session, recorder)
        stream = manual_session.streams[0]
        reentry_errors: list[Exception] = []

        def on_content(s: StreamingSession, value) -> None:
            recorder.events.append(("content", value))
            try:
                s.perform()
            except RuntimeError as e:
                reentry_errors.append(e)

        session.on_receive_content = on_content
        stream.on_chunk(sse_body([chat_chunk("tail")], done=None).rstrip(b"\n"))
        stream.on_complete(None)

        assert recorder.kinds() == ["content", "complete"]
        assert len(reentry_errors) == 1
        assert session.state is SessionState.COMPLETED
