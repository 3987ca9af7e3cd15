from __future__ import annotations

import textwrap
from pathlib import Path

from gemtext_site.cli import cli
from gemtext_site.filesystem import MAX_FILE_SIZE_ENV_VAR


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def _capsule(tmp_path: Path) -> Path:
    source = tmp_path / "capsule"
    _write(
        source / "index.gmi",
        """
        # Title
        Some text
        * item one
        * item two
        => https://example.com Example
        """,
    )
    _write(source / "notes" / "code.gmi", "```python\nprint('<hi>')\n```\n")
    return source


def test_cli_builds_site(cli_runner, tmp_path):
    source = _capsule(tmp_path)
    destination = tmp_path / "public"

    result = cli_runner.invoke(cli, [str(source), str(destination)])

    assert result.exit_code == 0, result.output
    assert (destination / "index.html").read_text(encoding="utf-8") == (
        "<h1>Title</h1>\n"
        "Some text\n"
        "<li>item one</li>\n"
        "<li>item two</li>\n"
        '<a href="https://example.com">Example</a>\n'
    )
    assert (destination / "notes" / "code.html").read_text(encoding="utf-8") == (
        "<pre>python\nprint('<hi>')\n</pre>"
    )
    assert not (destination / "index.gmi").exists()


def test_cli_escape_html_option(cli_runner, tmp_path):
    source = _capsule(tmp_path)
    destination = tmp_path / "public"

    result = cli_runner.invoke(cli, ["--escape-html", str(source), str(destination)])

    assert result.exit_code == 0, result.output
    assert (destination / "notes" / "code.html").read_text(encoding="utf-8") == (
        "<pre>python\nprint('&lt;hi&gt;')\n</pre>"
    )


def test_cli_custom_extensions(cli_runner, tmp_path):
    source = _capsule(tmp_path)
    destination = tmp_path / "public"

    result = cli_runner.invoke(
        cli, ["--target-extension", "htm", "--jobs", "2", str(source), str(destination)]
    )

    assert result.exit_code == 0, result.output
    assert (destination / "index.htm").exists()
    assert (destination / "notes" / "code.htm").exists()


def test_cli_reads_config_file(cli_runner, tmp_path):
    source = _capsule(tmp_path)
    _write(
        source / ".gemtext-site.toml",
        """
        [gemtext-site]
        target_extension = ".xhtml"
        """,
    )
    destination = tmp_path / "public"

    result = cli_runner.invoke(cli, [str(source), str(destination)])

    assert result.exit_code == 0, result.output
    assert (destination / "index.xhtml").exists()


def test_cli_rejects_invalid_config(cli_runner, tmp_path):
    source = _capsule(tmp_path)

    result = cli_runner.invoke(cli, ["--jobs", "0", str(source), str(tmp_path / "public")])

    assert result.exit_code != 0
    assert "`jobs` must be a positive integer" in result.output
    assert not (tmp_path / "public").exists()


def test_cli_rejects_existing_output(cli_runner, tmp_path):
    source = _capsule(tmp_path)
    destination = tmp_path / "public"
    destination.mkdir()

    result = cli_runner.invoke(cli, [str(source), str(destination)])

    assert result.exit_code == 1
    assert "Failed to copy directory" in result.output


def test_cli_requires_existing_input(cli_runner, tmp_path):
    result = cli_runner.invoke(cli, [str(tmp_path / "missing"), str(tmp_path / "public")])

    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_cli_requires_two_arguments(cli_runner, tmp_path):
    result = cli_runner.invoke(cli, [str(tmp_path)])

    assert result.exit_code != 0
    assert "Missing argument" in result.output


def test_cli_reports_failed_files_and_continues(cli_runner, tmp_path):
    source = _capsule(tmp_path)
    (source / "broken.gmi").write_bytes(b"\xff\xfe")
    destination = tmp_path / "public"

    result = cli_runner.invoke(cli, [str(source), str(destination)])

    assert result.exit_code == 1
    assert "couldn't convert" in result.output
    assert "broken.gmi" in result.output
    assert "1 of 3 files could not be converted" in result.output
    assert (destination / "index.html").exists()


def test_cli_warns_on_unterminated_block(cli_runner, tmp_path):
    source = tmp_path / "capsule"
    _write(source / "open.gmi", "```\ncode\n")

    result = cli_runner.invoke(cli, [str(source), str(tmp_path / "public")])

    assert result.exit_code == 0
    assert "ends inside a preformatted block" in result.output


def test_cli_close_preformatted_option(cli_runner, tmp_path):
    source = tmp_path / "capsule"
    _write(source / "open.gmi", "```\ncode\n")
    destination = tmp_path / "public"

    result = cli_runner.invoke(cli, ["--close-preformatted", str(source), str(destination)])

    assert result.exit_code == 0
    assert result.output == ""
    assert (destination / "open.html").read_text(encoding="utf-8") == "<pre>code\n</pre>"


def test_cli_honours_max_file_size_env(cli_runner, tmp_path, monkeypatch):
    source = _capsule(tmp_path)
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "5")

    result = cli_runner.invoke(cli, [str(source), str(tmp_path / "public")])

    assert result.exit_code == 1
    assert "maximum allowed size of 5 bytes" in result.output


def test_cli_rejects_invalid_max_file_size_env(cli_runner, tmp_path, monkeypatch):
    source = _capsule(tmp_path)
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "many")

    result = cli_runner.invoke(cli, [str(source), str(tmp_path / "public")])

    assert result.exit_code == 1
    assert "Invalid value for GEMTEXT_SITE_MAX_FILE_SIZE" in result.output
