from dataclasses import dataclass, field
from unittest.mock import Mock

import pytest

from conflux import Conflux, Context, LoadState, setting
from conflux.core.exceptions import (
    BindingError, ConfigError, LoadCancelledError, MergeError, SchemaValidationError,
    SourceError, UnregisteredCodecError, ValidationError, has_cause
)
from conflux.source import MapSource, Source


@dataclass
class ServerSettings:
    host: str = "localhost"
    port: int = 0


@dataclass
class Settings:
    server: ServerSettings = field(default_factory=ServerSettings)
    user_name: str = setting("db_user", default="")


class FailingSource(Source):

    def __init__(self, error):
        super().__init__("failing")
        self.error = error

    def load(self, ctx):
        raise self.error


class TestLoadScenarios:
    """End-to-end load behaviour over layered sources."""

    def test_later_source_overrides_leaf(self):
        conf = Conflux(sources=[
            MapSource({"server": {"port": 8080}}),
            MapSource({"server": {"port": 9090, "host": "x"}}),
        ])

        conf.load()

        assert conf.get_int("server.port") == 9090
        assert conf.get_string("server.host") == "x"

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("PREFIX_DB_USER_NAME", "admin")
        conf = Conflux().add_env_source("PREFIX_")

        conf.load()

        assert conf.get("db.user.name") == "admin"

    def test_failing_validator_keeps_previous_aggregate(self):
        source = MapSource({"port": 8080})

        def positive_port(values):
            if values["port"] < 0:
                raise ValueError("port must be positive")

        conf = Conflux(sources=[source], validators=[positive_port])
        conf.load()
        source.update({"port": -1})

        with pytest.raises(ValidationError):
            conf.load()

        assert conf.get_int("port") == 8080
        assert conf.state is LoadState.COMMITTED

    @pytest.mark.parametrize("binding", [Settings, {"server": {}}, "settings"])
    def test_binding_to_non_instance_fails_load(self, binding):
        conf = Conflux(sources=[MapSource({"server": {"port": 1}})], binding=binding)

        with pytest.raises(BindingError):
            conf.load()

        assert conf.state is LoadState.EMPTY
        assert conf.values() == {}


class TestLoadPipeline:

    def test_empty_before_first_load(self):
        conf = Conflux()

        assert conf.state is LoadState.EMPTY
        assert conf.values() == {}
        assert conf.get("anything") is None

    def test_load_without_sources_commits_empty_aggregate(self):
        conf = Conflux()

        conf.load()

        assert conf.state is LoadState.COMMITTED
        assert conf.values() == {}

    def test_keys_are_case_insensitive(self, defaults_source, override_source):
        conf = Conflux(sources=[defaults_source, override_source])

        conf.load()

        assert conf.values()["server"] == {"host": "x", "port": 9090, "tls": False}
        assert conf.get_int("SERVER.PORT") == 9090
        assert conf.get_int("Database.Pool") == 10
        assert conf.get_string_list("features") == ["a", "b"]

    def test_load_is_idempotent(self, defaults_source, override_source):
        conf = Conflux(sources=[defaults_source, override_source])

        conf.load()
        first = conf.values()
        conf.load()

        assert conf.values() == first

    def test_reload_picks_up_changes(self):
        source = MapSource({"a": 1})
        conf = Conflux(sources=[source])
        conf.load()
        source.update({"b": 2})

        conf.load()

        assert conf.values() == {"b": 2}

    def test_values_is_a_copy(self):
        conf = Conflux(sources=[MapSource({"a": {"b": 1}})])
        conf.load()

        conf.values()["a"]["b"] = 2

        assert conf.get_int("a.b") == 1

    def test_source_error_is_wrapped_with_position(self):
        cause = OSError("disk unavailable")
        conf = Conflux(sources=[MapSource({"a": 1}), FailingSource(cause)])

        with pytest.raises(SourceError) as exc_info:
            conf.load()

        assert exc_info.value.source == "source[1]"
        assert exc_info.value.operation == "load"
        assert has_cause(exc_info.value, cause)
        assert conf.state is LoadState.EMPTY

    def test_failed_reload_keeps_previous_aggregate(self):
        first = MapSource({"a": 1})
        second = MapSource({"b": 2})
        conf = Conflux(sources=[first, second])
        conf.load()
        first.update({"a": 99})
        second.load = Mock(side_effect=OSError("unreachable"))

        with pytest.raises(SourceError) as exc_info:
            conf.load()

        assert exc_info.value.source == "source[1]"
        assert conf.values() == {"a": 1, "b": 2}
        assert conf.get_int("a") == 1
        assert conf.state is LoadState.COMMITTED

    def test_later_sources_are_not_loaded_after_failure(self):
        later = Mock(spec=Source)
        conf = Conflux(sources=[FailingSource(RuntimeError("x")), later])

        with pytest.raises(SourceError):
            conf.load()

        later.load.assert_not_called()

    def test_non_mapping_fragment(self):
        source = Mock(spec=Source)
        source.load.return_value = ["a", "list"]
        conf = Conflux(sources=[MapSource({"a": 1}), source])

        with pytest.raises(MergeError) as exc_info:
            conf.load()

        assert exc_info.value.source == "source[1]"

    def test_none_fragment_contributes_nothing(self):
        conf = Conflux(sources=[MapSource({"a": 1}), MapSource(None)])

        conf.load()

        assert conf.values() == {"a": 1}

    def test_none_registrations_are_ignored(self):
        conf = Conflux().add_source(None).add_dumper(None).set_binding(None)

        assert conf.sources == []
        assert conf.dumpers == []

    def test_schema_failure(self):
        conf = Conflux(
            sources=[MapSource({"port": "8080"})],
            json_schema={"type": "object", "properties": {"port": {"type": "integer"}}},
        )

        with pytest.raises(SchemaValidationError) as exc_info:
            conf.load()

        assert exc_info.value.field == "port"
        assert conf.state is LoadState.EMPTY

    def test_validator_sees_merged_aggregate(self):
        seen = []
        conf = Conflux(
            sources=[MapSource({"A": 1}), MapSource({"b": 2})],
            validators=[seen.append],
        )

        conf.load()

        assert seen == [{"a": 1, "b": 2}]


class TestBinding:

    def test_binding_is_populated(self):
        settings = Settings()
        conf = Conflux(
            sources=[MapSource({"Server": {"Port": "8080"}}), MapSource({"DB_USER": "admin"})],
            binding=settings,
        )

        conf.load()

        assert settings.server.port == 8080
        assert settings.server.host == "localhost"
        assert settings.user_name == "admin"

    def test_binding_failure_keeps_aggregate_and_target(self):
        settings = Settings()
        source = MapSource({"server": {"port": 8080}})
        conf = Conflux(sources=[source], binding=settings)
        conf.load()
        source.update({"server": {"port": "eighty"}})

        with pytest.raises(BindingError) as exc_info:
            conf.load()

        assert exc_info.value.field == "server.port"
        assert conf.get_int("server.port") == 8080
        assert settings.server.port == 8080

    def test_set_binding_after_construction(self):
        settings = Settings()
        conf = Conflux(sources=[MapSource({"server": {"host": "h"}})]).set_binding(settings)

        conf.load()

        assert settings.server.host == "h"


class TestCodecHelpers:

    def test_file_source_by_format(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 8080\n")
        conf = Conflux().add_file_source(path, "yaml")

        conf.load()

        assert conf.get_int("server.port") == 8080

    def test_content_source_by_format(self):
        conf = Conflux().add_content_source('{"Name": "svc"}', "json")

        conf.load()

        assert conf.get_string("name") == "svc"

    def test_unknown_format_fails_at_registration(self):
        conf = Conflux()

        with pytest.raises(UnregisteredCodecError):
            conf.add_file_source("config.toml", "toml")
        with pytest.raises(UnregisteredCodecError):
            conf.add_file_dumper("out.env", "env_var")

        assert conf.sources == []

    def test_private_registry(self, codec_registry):
        codec_registry.clear()
        conf = Conflux(codec_registry=codec_registry)

        with pytest.raises(UnregisteredCodecError):
            conf.add_content_source("{}", "json")


class TestCancellation:

    def test_cancelled_context_stops_load(self):
        source = Mock(spec=Source)
        ctx = Context()
        ctx.cancel()
        conf = Conflux(sources=[source])

        with pytest.raises(LoadCancelledError) as exc_info:
            conf.load(ctx)

        source.load.assert_not_called()
        assert exc_info.value.source == "source[0]"
        assert conf.state is LoadState.EMPTY

    def test_cancellation_between_sources(self):
        ctx = Context()

        class CancellingSource(Source):
            def load(self, ctx):
                ctx.cancel()
                return {"a": 1}

        later = Mock(spec=Source)
        conf = Conflux(sources=[CancellingSource(), later])

        with pytest.raises(LoadCancelledError):
            conf.load(ctx)

        later.load.assert_not_called()

    def test_expired_deadline(self):
        conf = Conflux(sources=[MapSource({"a": 1})])

        with pytest.raises(ConfigError) as exc_info:
            conf.load(Context(timeout=0))

        assert has_cause(exc_info.value, TimeoutError)
