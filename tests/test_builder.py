"""Tests for waypoint.builder — the four-phase handler pipeline."""

import logging
from typing import Any

import pytest

from waypoint.builder import HandlerBuilder
from waypoint.context import ExtendedProperties, RequestContext
from waypoint.errors import ArgumentError, ConfigurationError, SchemaValidationError
from waypoint.http.request import Request
from waypoint.http.response import Response


class NextSpy:
    """Records every call made to the continuation."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)


class ProcessorSpy:
    """Records every processor invocation and returns a fixed result."""

    def __init__(self, result: Any = None) -> None:
        self.result = {"ok": True} if result is None else result
        self.calls: list[tuple[Any, RequestContext, ExtendedProperties]] = []

    def __call__(self, data: Any, context: RequestContext, ext: ExtendedProperties) -> Any:
        self.calls.append((data, context, ext))
        return self.result


def _request(**params: str) -> Request:
    return Request(method="GET", path="/users", params=params)


class TestConstruction:
    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ArgumentError, match=r"handler_name cannot be empty \(arg #1\)"):
            HandlerBuilder("", ProcessorSpy())

    def test_non_string_name_rejected(self) -> None:
        with pytest.raises(ArgumentError):
            HandlerBuilder(None, ProcessorSpy())  # type: ignore[arg-type]

    def test_argument_error_is_configuration_error(self) -> None:
        assert issubclass(ArgumentError, ConfigurationError)

    def test_setters_chain(self) -> None:
        builder = HandlerBuilder("chain", ProcessorSpy())
        assert builder.set_input_mapper({"a": "b"}) is builder
        assert builder.set_schema({"type": "object"}) is builder
        assert builder.set_output_mapper(lambda data, response, next: None) is builder

    def test_invalid_input_mapper_rejected(self) -> None:
        with pytest.raises(ArgumentError, match="input mapper"):
            HandlerBuilder("bad", ProcessorSpy()).set_input_mapper(42)  # type: ignore[arg-type]

    def test_empty_destination_path_rejected(self) -> None:
        with pytest.raises(ArgumentError, match="empty destination path"):
            HandlerBuilder("bad-table", ProcessorSpy()).set_input_mapper({"": "params.id"})

    def test_dots_only_destination_rejected(self) -> None:
        with pytest.raises(ArgumentError):
            HandlerBuilder("bad-table", ProcessorSpy()).set_input_mapper({"..": "params.id"})

    def test_non_string_source_rejected(self) -> None:
        with pytest.raises(ArgumentError, match="must be a str path"):
            HandlerBuilder("bad-table", ProcessorSpy()).set_input_mapper({"a": 1})  # type: ignore[dict-item]

    def test_handler_named_after_route(self) -> None:
        handler = HandlerBuilder("get-user", ProcessorSpy()).build()
        assert handler.__name__ == "handler[get-user]"

    def test_invalid_schema_fails_at_build(self) -> None:
        builder = HandlerBuilder("bad-schema", ProcessorSpy()).set_schema({"type": 12})
        with pytest.raises(ConfigurationError):
            builder.build()


class TestInputMapping:
    async def test_default_input_is_empty_dict(self) -> None:
        processor = ProcessorSpy()
        handler = HandlerBuilder("defaults", processor).build()
        await handler(_request(id="42"), Response(), NextSpy())
        assert processor.calls[0][0] == {}

    async def test_mapping_table(self) -> None:
        processor = ProcessorSpy()
        handler = (
            HandlerBuilder("table", processor).set_input_mapper({"user.id": "params.id"}).build()
        )
        await handler(_request(id="42"), Response(), NextSpy())
        assert processor.calls[0][0] == {"user": {"id": "42"}}

    async def test_mapping_function(self) -> None:
        processor = ProcessorSpy()
        handler = (
            HandlerBuilder("fn", processor)
            .set_input_mapper(lambda request: {"path": request.path})
            .build()
        )
        await handler(_request(), Response(), NextSpy())
        assert processor.calls[0][0] == {"path": "/users"}

    async def test_async_mapping_function(self) -> None:
        async def map_input(request: Request) -> dict[str, Any]:
            return {"id": request.params["id"]}

        processor = ProcessorSpy()
        handler = HandlerBuilder("async-fn", processor).set_input_mapper(map_input).build()
        await handler(_request(id="7"), Response(), NextSpy())
        assert processor.calls[0][0] == {"id": "7"}

    async def test_none_restores_default(self) -> None:
        processor = ProcessorSpy()
        handler = (
            HandlerBuilder("reset", processor)
            .set_input_mapper({"user.id": "params.id"})
            .set_input_mapper(None)
            .build()
        )
        await handler(_request(id="42"), Response(), NextSpy())
        assert processor.calls[0][0] == {}


class TestSchemaValidation:
    @pytest.fixture
    def checker_calls(self, monkeypatch: pytest.MonkeyPatch) -> list[tuple[Any, bool]]:
        """Replace the schema checker factory with a recording stub."""
        calls: list[tuple[Any, bool]] = []

        def fake_factory(schema: Any) -> Any:
            def check(candidate: Any, throw_on_error: bool = False) -> bool:
                calls.append((candidate, throw_on_error))
                return True

            return check

        monkeypatch.setattr("waypoint.builder.create_schema_checker", fake_factory)
        return calls

    async def test_not_invoked_without_schema(
        self, checker_calls: list[tuple[Any, bool]]
    ) -> None:
        handler = HandlerBuilder("no-schema", ProcessorSpy()).build()
        await handler(_request(), Response(), NextSpy())
        assert checker_calls == []

    async def test_invoked_once_with_throw(self, checker_calls: list[tuple[Any, bool]]) -> None:
        handler = (
            HandlerBuilder("schema", ProcessorSpy())
            .set_input_mapper({"user.id": "params.id"})
            .set_schema({"type": "object"})
            .build()
        )
        await handler(_request(id="42"), Response(), NextSpy())
        assert checker_calls == [({"user": {"id": "42"}}, True)]

    async def test_validation_failure_goes_to_next(self) -> None:
        processor = ProcessorSpy()
        next_spy = NextSpy()
        handler = (
            HandlerBuilder("strict", processor)
            .set_input_mapper({"user.id": "params.id"})
            .set_schema({"type": "object", "required": ["account"]})
            .build()
        )
        response = Response()
        await handler(_request(id="42"), response, next_spy)

        assert processor.calls == []
        assert len(next_spy.calls) == 1
        assert isinstance(next_spy.calls[0][0], SchemaValidationError)
        assert response.sent is False


class TestProcessing:
    async def test_sync_processor(self) -> None:
        response = Response()
        handler = HandlerBuilder("sync", lambda data, context, ext: {"n": 1}).build()
        await handler(_request(), response, NextSpy())
        assert response.body == b'{"n": 1}'
        assert response.content_type == "application/json"

    async def test_async_processor(self) -> None:
        async def process(data: Any, context: RequestContext, ext: ExtendedProperties) -> Any:
            return ["a", "b"]

        response = Response()
        await HandlerBuilder("async", process).build()(_request(), response, NextSpy())
        assert response.body == b'["a", "b"]'

    async def test_context_and_ext(self) -> None:
        processor = ProcessorSpy()
        handler = HandlerBuilder("ctx", processor, environ={}).build()
        await handler(_request(), Response(), NextSpy())

        _, context, ext = processor.calls[0]
        assert isinstance(context, RequestContext)
        assert len(context.request_id) == 12
        assert ext.alias == "default"
        assert ext.logger.context == {"handler": "ctx", "request_id": context.request_id}

    async def test_fresh_request_id_per_invocation(self) -> None:
        processor = ProcessorSpy()
        handler = HandlerBuilder("ids", processor).build()
        await handler(_request(), Response(), NextSpy())
        await handler(_request(), Response(), NextSpy())
        first, second = processor.calls[0][1], processor.calls[1][1]
        assert first.request_id != second.request_id

    async def test_alias_from_environment(self) -> None:
        processor = ProcessorSpy()
        handler = HandlerBuilder("alias", processor, environ={"WAYPOINT_ENV": "prod"}).build()
        await handler(_request(), Response(), NextSpy())
        assert processor.calls[0][2].alias == "prod"

    async def test_alias_read_per_request(self) -> None:
        environ: dict[str, str] = {}
        processor = ProcessorSpy()
        handler = HandlerBuilder("live-alias", processor, environ=environ).build()
        await handler(_request(), Response(), NextSpy())
        environ["WAYPOINT_ENV"] = "staging"
        await handler(_request(), Response(), NextSpy())
        assert [call[2].alias for call in processor.calls] == ["default", "staging"]

    async def test_custom_alias_variable(self) -> None:
        processor = ProcessorSpy()
        handler = HandlerBuilder(
            "custom-alias",
            processor,
            environ={"DEPLOY_ENV": "blue"},
            alias_variable="DEPLOY_ENV",
            alias_default="green",
        ).build()
        await handler(_request(), Response(), NextSpy())
        assert processor.calls[0][2].alias == "blue"

    async def test_alias_from_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WAYPOINT_ENV", "ci")
        processor = ProcessorSpy()
        await HandlerBuilder("os-alias", processor).build()(_request(), Response(), NextSpy())
        assert processor.calls[0][2].alias == "ci"


class TestOutputMapping:
    async def test_output_mapper_called_exactly_once(self) -> None:
        calls: list[tuple[Any, Any, Any]] = []

        def output_mapper(data: Any, response: Response, next: Any) -> None:
            calls.append((data, response, next))
            response.set_status(201).json(data)

        response = Response()
        next_spy = NextSpy()
        handler = (
            HandlerBuilder("created", ProcessorSpy({"id": 1}))
            .set_output_mapper(output_mapper)
            .build()
        )
        await handler(_request(), response, next_spy)

        assert calls == [({"id": 1}, response, next_spy)]
        assert response.status == 201
        assert next_spy.calls == []

    async def test_output_mapper_may_call_next(self) -> None:
        error = LookupError("gone")
        next_spy = NextSpy()

        async def output_mapper(data: Any, response: Response, next: Any) -> None:
            next(error)

        handler = HandlerBuilder("forward", ProcessorSpy()).set_output_mapper(output_mapper).build()
        await handler(_request(), Response(), next_spy)
        assert next_spy.calls == [(error,)]

    async def test_success_never_calls_next(self) -> None:
        next_spy = NextSpy()
        await HandlerBuilder("quiet", ProcessorSpy()).build()(_request(), Response(), next_spy)
        assert next_spy.calls == []


class TestErrorPropagation:
    async def test_input_mapper_error(self) -> None:
        error = KeyError("missing")
        processor = ProcessorSpy()
        next_spy = NextSpy()

        def explode(request: Request) -> dict[str, Any]:
            raise error

        handler = HandlerBuilder("bad-input", processor).set_input_mapper(explode).build()
        await handler(_request(), Response(), next_spy)

        assert next_spy.calls == [(error,)]
        assert processor.calls == []

    async def test_processor_error(self) -> None:
        error = RuntimeError("boom")
        output_calls: list[Any] = []

        async def process(data: Any, context: RequestContext, ext: ExtendedProperties) -> Any:
            raise error

        next_spy = NextSpy()
        handler = (
            HandlerBuilder("bad-processor", process)
            .set_output_mapper(lambda data, response, next: output_calls.append(data))
            .build()
        )
        response = Response()
        await handler(_request(), response, next_spy)

        assert next_spy.calls == [(error,)]
        assert output_calls == []
        assert response.sent is False

    async def test_output_mapper_error(self) -> None:
        error = ValueError("cannot serialize")

        def output_mapper(data: Any, response: Response, next: Any) -> None:
            raise error

        next_spy = NextSpy()
        handler = (
            HandlerBuilder("bad-output", ProcessorSpy()).set_output_mapper(output_mapper).build()
        )
        await handler(_request(), Response(), next_spy)
        assert next_spy.calls == [(error,)]

    async def test_async_continuation_awaited(self) -> None:
        received: list[BaseException] = []

        async def next_fn(error: BaseException) -> None:
            received.append(error)

        def process(data: Any, context: RequestContext, ext: ExtendedProperties) -> Any:
            raise RuntimeError("boom")

        await HandlerBuilder("async-next", process).build()(_request(), Response(), next_fn)
        assert len(received) == 1

    async def test_raising_continuation_does_not_escape(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        def process(data: Any, context: RequestContext, ext: ExtendedProperties) -> Any:
            raise RuntimeError("boom")

        def next_fn(error: BaseException) -> None:
            raise LookupError("continuation failed")

        with caplog.at_level(logging.ERROR, logger="waypoint.handler"):
            await HandlerBuilder("bad-next", process).build()(_request(), Response(), next_fn)

        messages = [r.getMessage() for r in caplog.records]
        assert "Error forwarding failure to continuation" in messages

    async def test_failure_logged_with_context(self, caplog: pytest.LogCaptureFixture) -> None:
        def process(data: Any, context: RequestContext, ext: ExtendedProperties) -> Any:
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="waypoint.handler"):
            await HandlerBuilder("logged", process).build()(_request(), Response(), NextSpy())

        record = next(r for r in caplog.records if r.getMessage() == "Error executing handler")
        assert record.handler == "logged"  # type: ignore[attr-defined]
        assert len(record.request_id) == 12  # type: ignore[attr-defined]
        assert record.exc_info is not None


class TestBuildSnapshot:
    async def test_later_setters_do_not_affect_built_handler(self) -> None:
        processor = ProcessorSpy()
        builder = HandlerBuilder("snapshot", processor).set_input_mapper({"a": "params.id"})
        first = builder.build()
        builder.set_input_mapper({"b": "params.id"})
        second = builder.build()

        await first(_request(id="1"), Response(), NextSpy())
        await second(_request(id="2"), Response(), NextSpy())
        assert [call[0] for call in processor.calls] == [{"a": "1"}, {"b": "2"}]

    async def test_handler_reusable_across_requests(self) -> None:
        processor = ProcessorSpy()
        handler = HandlerBuilder("reuse", processor).build()
        for _ in range(3):
            await handler(_request(), Response(), NextSpy())
        assert len(processor.calls) == 3

    async def test_debug_trace_records(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="waypoint.handler"):
            await HandlerBuilder("traced", ProcessorSpy()).build()(
                _request(), Response(), NextSpy()
            )
        messages = [r.getMessage() for r in caplog.records]
        assert "HANDLER START" in messages
        assert "No schema specified. Skipping schema validation" in messages
        assert "HANDLER END" in messages
