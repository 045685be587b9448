from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

import pytest

from conflux.binder import Binder, describe, setting
from conflux.core.exceptions import BindingError, ValidationError


class Mode(Enum):
    DEV = "dev"
    PROD = "prod"


@dataclass
class DatabaseSettings:
    host: str = "localhost"
    port: int = 5432
    user: str = setting("username", default="app")


@dataclass
class Timeouts:
    read: timedelta = timedelta(seconds=5)
    write: timedelta = timedelta(seconds=5)


@dataclass
class BaseSettings:
    name: str = ""
    debug: bool = False


@dataclass
class AppSettings(BaseSettings):
    mode: Mode = Mode.DEV
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    timeouts: Timeouts = setting(squash=True, default_factory=Timeouts)
    hosts: List[str] = field(default_factory=list)
    ports: List[int] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    ratio: float = 0.0
    price: Decimal = Decimal(0)
    started: Optional[datetime] = None
    extra: Any = None
    _secret: str = "untouched"


@dataclass
class CheckedSettings:
    port: int = 0

    def validate(self):
        if self.port <= 0:
            raise ValueError("port must be positive")


@dataclass
class FalseCheckedSettings:
    port: int = 0

    def validate(self):
        return self.port > 0


class TestBinder:
    """Test projection of aggregates onto dataclass instances."""

    def setup_method(self):
        self.binder = Binder()

    def test_binds_scalars_and_nested(self):
        target = AppSettings()
        values = {
            "name": "svc",
            "debug": "true",
            "mode": "prod",
            "database": {"host": "db", "port": "6543", "username": "admin"},
            "read": "30s",
            "hosts": ["a", "b"],
            "ports": "80 443",
            "labels": {"env": "prod", "tier": 1},
            "ratio": "0.5",
            "price": "9.99",
            "started": "2024-01-02T00:00:00Z",
            "extra": {"free": ["form"]},
        }

        self.binder.bind(values, target)

        assert target.name == "svc"
        assert target.debug is True
        assert target.mode is Mode.PROD
        assert target.database == DatabaseSettings(host="db", port=6543, user="admin")
        assert target.timeouts == Timeouts(read=timedelta(seconds=30), write=timedelta(seconds=5))
        assert target.hosts == ["a", "b"]
        assert target.ports == [80, 443]
        assert target.labels == {"env": "prod", "tier": "1"}
        assert target.ratio == 0.5
        assert target.price == Decimal("9.99")
        assert target.started == datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert target.extra == {"free": ["form"]}

    def test_binding_is_additive(self):
        target = AppSettings(name="keep", database=DatabaseSettings(host="h", port=1))

        self.binder.bind({"database": {"port": 2}}, target)

        assert target.name == "keep"
        assert target.database.host == "h"
        assert target.database.port == 2

    def test_untagged_field_matches_by_name_only(self):
        target = DatabaseSettings()

        self.binder.bind({"user": "ignored", "username": "used"}, target)

        assert target.user == "used"

    def test_private_fields_are_never_written(self):
        target = AppSettings()

        self.binder.bind({"_secret": "leak", "secret": "leak"}, target)

        assert target._secret == "untouched"

    def test_enum_by_name(self):
        target = AppSettings()

        self.binder.bind({"mode": "PROD"}, target)

        assert target.mode is Mode.PROD

    def test_optional_accepts_none(self):
        target = AppSettings(started=datetime(2020, 1, 1, tzinfo=timezone.utc))

        self.binder.bind({"started": None}, target)

        assert target.started is None

    @pytest.mark.parametrize("target", [AppSettings, {"a": 1}, None, "text"])
    def test_rejects_non_dataclass_instance(self, target):
        with pytest.raises(BindingError) as exc_info:
            self.binder.bind({"name": "x"}, target)

        assert exc_info.value.operation == "bind"

    @pytest.mark.parametrize("values,field_path", [
        ({"database": {"port": "not-a-port"}}, "database.port"),
        ({"database": "flat"}, "database"),
        ({"ports": ["1", "x"]}, "ports[1]"),
        ({"mode": "staging"}, "mode"),
        ({"ratio": 1.5, "debug": "perhaps"}, "debug"),
        ({"database": {"port": 1.5}}, "database.port"),
        ({"name": ["list"]}, "name"),
    ])
    def test_decode_errors_name_the_field(self, values, field_path):
        with pytest.raises(BindingError) as exc_info:
            self.binder.bind(values, AppSettings())

        assert exc_info.value.field == field_path
        assert exc_info.value.operation == "decode"

    def test_failed_decode_leaves_target_untouched(self):
        target = AppSettings(name="before")

        with pytest.raises(BindingError):
            self.binder.bind({"name": "after", "database": {"port": "x"}}, target)

        assert target.name == "before"
        assert target.database.port == 5432

    def test_validate_hook_raising(self):
        target = CheckedSettings(port=1)

        with pytest.raises(ValidationError) as exc_info:
            self.binder.bind({"port": -1}, target)

        assert exc_info.value.source == "binding"
        assert "port must be positive" in str(exc_info.value)
        assert target.port == 1

    def test_validate_hook_returning_false(self):
        with pytest.raises(ValidationError):
            self.binder.bind({"port": 0}, FalseCheckedSettings(port=5))

    def test_validate_hook_passing(self):
        target = CheckedSettings()

        self.binder.bind({"port": "8080"}, target)

        assert target.port == 8080


class TestDescribe:

    def test_descriptor_is_cached_per_type(self):
        assert describe(AppSettings) is describe(AppSettings)

    def test_descriptor_contents(self):
        by_name = {d.name: d for d in describe(AppSettings)}

        assert "_secret" not in by_name
        assert by_name["timeouts"].squash is True
        assert by_name["database"].squash is False
        assert describe(DatabaseSettings)[2].key == "username"
        assert "name" in by_name
