"""CliApp — Typer アプリケーション定義。

show: ソースを重ねて設定を構築し、シークレットをマスクして表示する。
fields: 設定モデルの記述子テーブルを表示する。
"""

from __future__ import annotations

import importlib.metadata
import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import BaseModel
from rich.console import Console

from kasane.builder import ConfigBuilder
from kasane.cli._render import render_fields, render_json, render_table
from kasane.cli._target import InputError, import_model
from kasane.errors import KasaneError, SecretViolationError, SourceError
from kasane.models.exit_code import ExitCode
from kasane.schema import describe
from kasane.sources import EnvSource, FileSource


class OutputFormat(StrEnum):
    """show の出力形式。"""

    TABLE = "table"
    JSON = "json"


app = typer.Typer(
    name="kasane",
    help="Build layered configuration from files and environment variables.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("kasane"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def _root_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
) -> None:
    """Build layered configuration from files and environment variables."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command()
def show(
    target: Annotated[
        str, typer.Argument(help="Configuration model as 'package.module:Model'.")
    ],
    files: Annotated[
        list[Path] | None,
        typer.Option(
            "--file", "-f", help="Configuration file (lowest priority first)."
        ),
    ] = None,
    secure_files: Annotated[
        list[Path] | None,
        typer.Option(
            "--secure-file", help="Configuration file allowed to contain secrets."
        ),
    ] = None,
    env_prefix: Annotated[
        str | None,
        typer.Option("--env-prefix", help="Read environment variables with this prefix."),
    ] = None,
    secure_env: Annotated[
        bool,
        typer.Option("--secure-env", help="Allow environment variables to set secrets."),
    ] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: table or json.")
    ] = OutputFormat.TABLE,
    app_dir: Annotated[
        Path | None,
        typer.Option("--app-dir", help="Directory added to the module search path."),
    ] = None,
) -> None:
    """Build the configuration and print it with secrets masked.

    Sources are applied in this order, later ones taking priority:
    --file, --secure-file, then the environment when --env-prefix is given.
    """
    model = _import_or_exit(target, app_dir)
    try:
        config_builder = ConfigBuilder(model)
    except TypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    try:
        for path in files or []:
            config_builder.override_with(FileSource(path))
        for path in secure_files or []:
            config_builder.override_with(FileSource(path, secure=True))
        if env_prefix is not None:
            config_builder.override_with(EnvSource(env_prefix, secure=secure_env))
        config = config_builder.try_build()
    except SecretViolationError as e:
        print(
            f"Error: {e}\n"
            "Move the value to a source passed with --secure-file or use --secure-env.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.SECRET_ERROR) from None
    except SourceError as e:
        cause = f" ({e.__cause__})" if e.__cause__ is not None else ""
        print(f"Error: {e}{cause}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.SOURCE_ERROR) from None
    except KasaneError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR) from None

    if output_format is OutputFormat.JSON:
        print(render_json(config))
    else:
        Console().print(render_table(config))


@app.command()
def fields(
    target: Annotated[
        str, typer.Argument(help="Configuration model as 'package.module:Model'.")
    ],
    app_dir: Annotated[
        Path | None,
        typer.Option("--app-dir", help="Directory added to the module search path."),
    ] = None,
) -> None:
    """List the fields of a configuration model."""
    model = _import_or_exit(target, app_dir)
    try:
        schema = describe(model)
    except TypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    Console().print(render_fields(schema))


def _import_or_exit(target: str, app_dir: Path | None) -> type[BaseModel]:
    """ターゲットをインポートする。失敗時は終了コード 4 で終了する。"""
    try:
        return import_model(target, app_dir)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
