"""Tests for sample prompt sources."""

from pathlib import Path

from prompt_ledger.sample.source import FileSampleTextSource, StaticSampleTextSource


def test_file_source_reads_and_strips(tmp_path: Path) -> None:
    path = tmp_path / "invoicing_prompt.md"
    path.write_text("\n# Laskutusavustaja\n\nOhjeet...\n\n", encoding="utf-8")

    assert FileSampleTextSource(path).fetch_sample_text() == "# Laskutusavustaja\n\nOhjeet..."


def test_missing_file_yields_empty_text(tmp_path: Path) -> None:
    assert FileSampleTextSource(tmp_path / "missing.md").fetch_sample_text() == ""


def test_directory_path_yields_empty_text(tmp_path: Path) -> None:
    assert FileSampleTextSource(tmp_path).fetch_sample_text() == ""


def test_static_source() -> None:
    assert StaticSampleTextSource("  sample  ").fetch_sample_text() == "sample"
    assert StaticSampleTextSource().fetch_sample_text() == ""
