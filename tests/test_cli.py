"""Tests for waypoint.cli — ``waypoint routes`` and ``waypoint check``."""

import sys
import types
from typing import Any

import pytest

from waypoint.app import App
from waypoint.cli import main
from waypoint.cli._resolve import resolve_target, router_for
from waypoint.definitions import RouteDefinition
from waypoint.errors import ConfigurationError
from waypoint.routing.router import Router


def process(data: Any, context: Any, ext: Any) -> Any:
    return data


ROUTES = [
    RouteDefinition(method="get", path="/users/:id", handler=process, name="get-user"),
    RouteDefinition(method="post", path="/users", handler=process),
    RouteDefinition(method="all", path="/health", handler=process, name="health"),
]


@pytest.fixture(autouse=True)
def _fake_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module holding every kind of CLI target."""
    router = Router()
    router.get("/ping", process, name="ping")

    mod = types.ModuleType("_waypoint_cli_target")
    mod.app = App(environ={}).mount(ROUTES)  # type: ignore[attr-defined]
    mod.routes = ROUTES  # type: ignore[attr-defined]
    mod.router = router  # type: ignore[attr-defined]
    mod.make_routes = lambda: list(ROUTES)  # type: ignore[attr-defined]
    mod.broken = [RouteDefinition(method="fetch", path="/", handler=process)]  # type: ignore[attr-defined]
    mod.empty = []  # type: ignore[attr-defined]
    mod.not_routes = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_waypoint_cli_target", mod)


class TestResolveTarget:
    def test_default_attribute_is_app(self) -> None:
        assert isinstance(resolve_target("_waypoint_cli_target"), App)

    def test_router(self) -> None:
        assert isinstance(resolve_target("_waypoint_cli_target:router"), Router)

    def test_definitions(self) -> None:
        assert resolve_target("_waypoint_cli_target:routes") is ROUTES

    def test_factory_called(self) -> None:
        assert resolve_target("_waypoint_cli_target:make_routes") == ROUTES

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match="not an App, Router, or sequence"):
            resolve_target("_waypoint_cli_target:not_routes")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_target("nonexistent_module_xyz:app")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_target("_waypoint_cli_target:does_not_exist")

    def test_router_for_definitions(self) -> None:
        router = router_for(ROUTES)
        assert len(router) == 3

    def test_router_for_broken_definitions(self) -> None:
        with pytest.raises(ConfigurationError):
            router_for(resolve_target("_waypoint_cli_target:broken"))


class TestRoutesCommand:
    def test_lists_routes(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_waypoint_cli_target:routes"])
        out = capsys.readouterr().out.splitlines()
        assert out[0].split() == ["METHOD", "PATH", "NAME"]
        assert out[2].split() == ["GET", "/users/:id", "get-user"]
        assert out[3].split() == ["POST", "/users", "post", "/users"]
        assert out[4].split() == ["ALL", "/health", "health"]

    def test_app_target(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_waypoint_cli_target:app"])
        assert "get-user" in capsys.readouterr().out

    def test_router_target(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_waypoint_cli_target:router"])
        assert "/ping" in capsys.readouterr().out

    def test_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_waypoint_cli_target:empty"])
        assert "No routes registered." in capsys.readouterr().out

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "nonexistent_module_xyz:app"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestCheckCommand:
    def test_valid_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", "_waypoint_cli_target:routes"])
        assert "OK: 3 routes assembled." in capsys.readouterr().out

    def test_single_route(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", "_waypoint_cli_target:router"])
        assert "OK: 1 route assembled." in capsys.readouterr().out

    def test_configuration_error_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_waypoint_cli_target:broken"])
        assert exc_info.value.code == 1
        assert "Unsupported HTTP method 'fetch'" in capsys.readouterr().err

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "nonexistent_module_xyz:app"])
        assert exc_info.value.code == 1


class TestMain:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "waypoint" in capsys.readouterr().out
