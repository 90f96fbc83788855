"""ConfigBuilder のテスト。

ソースの優先順位、デフォルトの抑止、シークレットの扱い、空コレクションと未設定の区別、
同一ソースの再適用、失敗時の状態保持。
"""

from __future__ import annotations

from typing import Annotated

import pytest
from pydantic import Field

from kasane import (
    ConfigBuilder,
    KasaneBaseModel,
    LiteralSource,
    Secret,
    build_from_sources,
    builder,
)
from kasane.errors import (
    MissingValueError,
    SecretViolationError,
    ShapeError,
    SourceError,
)


class Login(KasaneBaseModel):
    """ホストと認証情報。"""

    host: str
    username: str
    password: Annotated[str, Secret()]


class Tuning(KasaneBaseModel):
    workers: int = 2
    ratio: float = 0.5
    name: str = "default"
    debug: bool = False


class Cache(KasaneBaseModel):
    ttl: int
    size: int


class Application(KasaneBaseModel):
    cache: Cache = Field(default_factory=lambda: Cache(ttl=60, size=128))
    hosts: list[str] = Field(default_factory=lambda: ["localhost"])
    labels: dict[str, str] = Field(default_factory=lambda: {"env": "dev"})


class TestOverrideOrder:
    """後から適用したソースが優先される。"""

    @pytest.mark.parametrize(
        ("field", "low", "high"),
        [
            ("workers", 1, 8),
            ("ratio", 0.1, 0.9),
            ("name", "low", "high"),
            ("debug", False, True),
        ],
    )
    def test_later_source_wins(self, field: str, low: object, high: object) -> None:
        config = (
            ConfigBuilder(Tuning)
            .override_with(LiteralSource({field: low}))
            .override_with(LiteralSource({field: high}))
            .try_build()
        )
        assert getattr(config, field) == high

    def test_untouched_fields_keep_defaults(self) -> None:
        config = ConfigBuilder(Tuning).override_with(LiteralSource({"workers": 4})).try_build()
        assert config == Tuning(workers=4)

    def test_no_sources_builds_defaults(self) -> None:
        assert ConfigBuilder(Tuning).try_build() == Tuning()


class TestDefaults:
    """デフォルトは未設定フィールドにのみ適用される。"""

    def test_aggregate_default_used_when_untouched(self) -> None:
        assert ConfigBuilder(Application).try_build().cache == Cache(ttl=60, size=128)

    def test_partially_set_aggregate_reports_missing_child(self) -> None:
        config_builder = ConfigBuilder(Application).override_with(
            LiteralSource({"cache": {"ttl": 5}})
        )
        with pytest.raises(MissingValueError) as exc_info:
            config_builder.try_build()
        assert exc_info.value.path == ("cache", "size")

    def test_explicit_empty_collections_suppress_defaults(self) -> None:
        config = (
            ConfigBuilder(Application)
            .override_with(LiteralSource({"hosts": [], "labels": {}}))
            .try_build()
        )
        assert config.hosts == []
        assert config.labels == {}

    def test_unset_collections_use_defaults(self) -> None:
        config = ConfigBuilder(Application).try_build()
        assert config.hosts == ["localhost"]
        assert config.labels == {"env": "dev"}

    def test_unkeyed_collection_replaced_by_later_source(self) -> None:
        config = (
            ConfigBuilder(Application)
            .override_with(LiteralSource({"hosts": ["a", "b"]}))
            .override_with(LiteralSource({"hosts": ["c"]}))
            .try_build()
        )
        assert config.hosts == ["c"]

    def test_keyed_collections_merge_across_sources(self) -> None:
        config = (
            ConfigBuilder(Application)
            .override_with(LiteralSource({"labels": {"env": "prod", "team": "a"}}))
            .override_with(LiteralSource({"labels": {"team": "b"}}))
            .try_build()
        )
        assert config.labels == {"env": "prod", "team": "b"}


class TestSecrets:
    """secure なソースのみがシークレットを供給できる。"""

    def test_secret_from_secure_source(self) -> None:
        config = build_from_sources(
            Login,
            LiteralSource({"host": "google.com", "username": "root"}),
            LiteralSource({"password": "hunter2"}, secure=True),
        )
        assert config == Login(host="google.com", username="root", password="hunter2")

    def test_secret_from_insecure_source(self) -> None:
        config_builder = ConfigBuilder(Login).override_with(
            LiteralSource({"host": "google.com", "username": "root"})
        )
        with pytest.raises(SecretViolationError) as exc_info:
            config_builder.override_with(
                LiteralSource({"password": "hunter2"}, name="shared defaults")
            )
        error = exc_info.value
        assert error.path == ("password",)
        assert error.source == "shared defaults"
        assert str(error) == (
            "Found secret at path `password` in source shared defaults "
            "that does not permit secrets"
        )

    def test_allow_secrets_marks_source_secure(self) -> None:
        config = build_from_sources(
            Login,
            LiteralSource(
                {"host": "h", "username": "u", "password": "p"}
            ).allow_secrets(),
        )
        assert config.password == "p"

    def test_failed_override_keeps_builder_state(self) -> None:
        config_builder = ConfigBuilder(Login).override_with(
            LiteralSource({"host": "a", "username": "u"})
        )
        before = config_builder.partial
        with pytest.raises(SecretViolationError):
            config_builder.override_with(LiteralSource({"host": "b", "password": "p"}))
        assert config_builder.partial is before
        config = config_builder.override_with(
            LiteralSource({"password": "p"}, secure=True)
        ).try_build()
        assert config.host == "a"

    def test_missing_secret(self) -> None:
        with pytest.raises(MissingValueError) as exc_info:
            build_from_sources(Login, LiteralSource({"host": "h", "username": "u"}))
        assert exc_info.value.path == ("password",)


class TestBuilderState:
    """ビルダーの状態と再適用。"""

    def test_reapplying_same_source_is_idempotent(self) -> None:
        source = LiteralSource({"workers": 3, "name": "x"})
        once = ConfigBuilder(Tuning).override_with(source)
        twice = ConfigBuilder(Tuning).override_with(source).override_with(source)
        assert once.partial == twice.partial
        assert once.try_build() == twice.try_build()

    def test_try_build_does_not_consume_builder(self) -> None:
        config_builder = ConfigBuilder(Tuning).override_with(LiteralSource({"workers": 3}))
        assert config_builder.try_build().workers == 3
        config_builder.override_with(LiteralSource({"workers": 5}))
        assert config_builder.try_build().workers == 5

    def test_builder_helper(self) -> None:
        config_builder = builder(Tuning)
        assert isinstance(config_builder, ConfigBuilder)
        assert config_builder.schema.model is Tuning

    def test_literal_source_data_is_not_shared(self) -> None:
        data: dict[str, object] = {"hosts": ["a"]}
        config = build_from_sources(Application, LiteralSource(data))
        data["hosts"].append("b")  # type: ignore[attr-defined]
        assert config.hosts == ["a"]

    def test_unknown_key_is_source_error(self) -> None:
        with pytest.raises(SourceError) as exc_info:
            ConfigBuilder(Tuning).override_with(LiteralSource({"bogus": 1}, name="inline"))
        assert exc_info.value.source == "inline"
        assert isinstance(exc_info.value.__cause__, ShapeError)
        assert exc_info.value.path == ()

    def test_non_model_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            ConfigBuilder(int)  # type: ignore[type-var]
