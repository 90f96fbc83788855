"""例外階層のテスト。"""

from __future__ import annotations

import pytest

from kasane.errors import (
    ConversionError,
    KasaneError,
    MissingValueError,
    SecretViolationError,
    ShapeError,
    SourceError,
    format_path,
)


class TestFormatPath:
    def test_dotted(self) -> None:
        assert format_path(("db", "hosts", "0")) == "db.hosts.0"

    def test_empty_is_root(self) -> None:
        assert format_path(()) == "<root>"


class TestPrepend:
    """巻き戻り時のパス修飾。"""

    def test_segments_are_prepended_outermost_last(self) -> None:
        error = MissingValueError()
        error.prepend("password")
        error.prepend(1)
        error.prepend("users")
        assert error.path == ("users", "1", "password")

    def test_source_error_path_is_not_qualified(self) -> None:
        error = SourceError("file 'a.toml'", "boom")
        error.prepend("db")
        assert error.path == ()


class TestMessages:
    """エラーメッセージの書式。"""

    @pytest.mark.parametrize(
        ("error", "message"),
        [
            (MissingValueError(path=("db", "host")), "Missing value for path `db.host`"),
            (MissingValueError(), "Missing value for path `<root>`"),
            (
                SecretViolationError(path=("token",)),
                "Found secret at path `token`",
            ),
            (
                SecretViolationError(path=("token",), source="environment"),
                "Found secret at path `token` in source environment "
                "that does not permit secrets",
            ),
            (
                ConversionError("bad port", path=("port",)),
                "Failed conversion for path `port`: bad port",
            ),
            (
                ShapeError("expected a mapping, got int", path=("db",)),
                "Unexpected data at path `db`: expected a mapping, got int",
            ),
            (
                SourceError("TOML text", "Expected '='"),
                "Source TOML text returned an error: Expected '='",
            ),
        ],
    )
    def test_str(self, error: KasaneError, message: str) -> None:
        assert str(error) == message

    def test_all_errors_share_base(self) -> None:
        for error_type in (
            MissingValueError,
            SecretViolationError,
            ConversionError,
            ShapeError,
        ):
            assert issubclass(error_type, KasaneError)
        assert issubclass(SourceError, KasaneError)
