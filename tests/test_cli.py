"""
tests/test_cli.py
Tests for the ``connectvue`` command line: argument handling, exit codes
and the report printed to stdout.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Iterator, List

import pytest

from connectvue.cli import (
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    _build_parser,
    cli_main,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """cli_main reconfigures the ``connectvue`` logger; undo it after each test."""
    yield
    logging.disable(logging.NOTSET)
    root = logging.getLogger("connectvue")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli_main(argv)
    return int(excinfo.value.code)


class TestParser:
    def test_defaults(self) -> None:
        args = _build_parser().parse_args(["-d", "x.yaml"])
        assert args.output is None
        assert args.dry_run is False
        assert args.verbose == 0
        assert args.output_root is None

    def test_descriptor_required(self, capsys) -> None:
        assert _run([]) == 2
        assert "--descriptor" in capsys.readouterr().err

    def test_version(self, capsys) -> None:
        assert _run(["--version"]) == 0
        assert "protoc-gen-connect-vue v" in capsys.readouterr().out


class TestCliMain:
    def test_generate(self, descriptor_yaml_path: pathlib.Path, output_dir: pathlib.Path, capsys) -> None:
        code = _run(["-d", str(descriptor_yaml_path), "-o", str(output_dir), "-q"])
        assert code == EXIT_SUCCESS
        assert (output_dir / "api.ts").is_file()
        assert "SUCCESS" in capsys.readouterr().out

    def test_overrides_reach_output(self, descriptor_yaml_path, output_dir) -> None:
        code = _run([
            "-d", str(descriptor_yaml_path),
            "-o", str(output_dir),
            "--hook-prefix", "useApi",
            "--output-root", "@/gen",
            "--base-url", "/v2",
            "--no-manifest",
            "-q",
        ])
        assert code == EXIT_SUCCESS
        api = (output_dir / "api.ts").read_text(encoding="utf-8")
        assert "export function useApiGetTicket(" in api
        assert 'from "@/gen/tickets/v1/ticket_pb";' in api
        assert 'let baseUrl = "/v2";' in (output_dir / "client.ts").read_text(encoding="utf-8")
        assert not (output_dir / "manifest.json").exists()

    def test_dry_run_needs_no_output(self, descriptor_yaml_path, capsys) -> None:
        assert _run(["-d", str(descriptor_yaml_path), "--dry-run", "-q"]) == EXIT_SUCCESS
        assert "(dry run)" in capsys.readouterr().out

    def test_missing_output(self, descriptor_yaml_path) -> None:
        assert _run(["-d", str(descriptor_yaml_path), "-q"]) == EXIT_INPUT_ERROR

    def test_missing_descriptor(self, tmp_path, output_dir) -> None:
        assert _run(["-d", str(tmp_path / "nope.yaml"), "-o", str(output_dir), "-q"]) == EXIT_INPUT_ERROR

    def test_invalid_document(self, tmp_path, output_dir) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("files:\n  - {name: a.proto, bogus: 1}\n", encoding="utf-8")
        assert _run(["-d", str(path), "-o", str(output_dir), "-q"]) == EXIT_INPUT_ERROR

    def test_template_error(self, descriptor_yaml_path, output_dir, tmp_path) -> None:
        templates = tmp_path / "tpl"
        templates.mkdir()
        (templates / "client.ts.jinja").write_text("{{ nope }}", encoding="utf-8")
        code = _run([
            "-d", str(descriptor_yaml_path),
            "-o", str(output_dir),
            "--template-dir", str(templates),
            "-q",
        ])
        assert code == EXIT_GENERATION_ERROR
        assert not output_dir.exists()

    def test_verbose_logs_to_stderr(self, descriptor_yaml_path, capsys) -> None:
        assert _run(["-d", str(descriptor_yaml_path), "--dry-run", "-v"]) == EXIT_SUCCESS
        assert "connectvue" in capsys.readouterr().err
