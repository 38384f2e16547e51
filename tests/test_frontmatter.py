from __future__ import annotations

from mdskills.frontmatter import parse_frontmatter, render_frontmatter


def test_parses_flat_keys_and_strips_quotes() -> None:
    fm = parse_frontmatter('---\nname: "pdf-tools"\ndescription: \'Read PDFs\'\nlicense: MIT\n---\n# Body\n')

    assert fm.name == "pdf-tools"
    assert fm.description == "Read PDFs"
    assert fm.license == "MIT"
    assert fm.body == "# Body\n"


def test_parses_inline_and_dash_lists() -> None:
    fm = parse_frontmatter(
        "---\ntags: [pdf, 'docs', \"office\"]\ncompatibility:\n  - Claude Code\n  - cursor\n---\nbody"
    )

    assert fm.tags == ["pdf", "docs", "office"]
    assert fm.compatibility == ["Claude Code", "cursor"]


def test_windows_line_endings_are_normalized() -> None:
    fm = parse_frontmatter("---\r\nname: x\r\n---\r\nhello")
    assert fm.name == "x"
    assert fm.body == "hello"


def test_text_without_block_is_all_body() -> None:
    text = "# Just a README\n\nname: not frontmatter"
    fm = parse_frontmatter(text)

    assert fm.raw == {}
    assert fm.body == text
    assert fm.tags == []


def test_empty_input() -> None:
    fm = parse_frontmatter("")
    assert fm.raw == {}
    assert fm.body == ""


def test_unclosed_block_is_body() -> None:
    text = "---\nname: x\nno closing fence"
    assert parse_frontmatter(text).body == text


def test_render_then_parse_keeps_fields() -> None:
    rendered = render_frontmatter({"name": "demo", "version": "1.0.0"}, "\n# Demo\n")

    assert rendered.startswith("---\nname: demo\nversion: 1.0.0\n---\n")
    fm = parse_frontmatter(rendered)
    assert fm.raw == {"name": "demo", "version": "1.0.0"}
    assert fm.body == "\n# Demo\n"
