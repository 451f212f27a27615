"""Tests for decode, listing and search queries."""

from pathlib import Path

import pytest

from bcs.corpus.query import (
    CONTENT_SEPARATOR,
    clean_title,
    decode_path,
    decode_to_content,
    decode_to_path,
    file_info,
    join_contents,
    list_codes,
    list_sections,
    search,
)
from bcs.corpus.resolver import ALL
from bcs.models import CodeAddress, CodeNotFound, InvalidPattern, MalformedCode, Tier, TierNotFound


def test_decode_unknown_code(corpus_index):
    results = decode_to_path(corpus_index, ["BCS9999"], Tier.COMPLETE)
    assert len(results) == 1
    assert isinstance(results[0].error, CodeNotFound)
    assert results[0].paths == []


def test_decode_keeps_input_order_and_errors(corpus_index):
    results = decode_to_path(corpus_index, ["BCS0201", "BCS12", "BCS0102", "BCS0102"], Tier.RULET)
    assert [r.token for r in results] == ["BCS0201", "BCS12", "BCS0102", "BCS0102"]
    assert isinstance(results[0].error, TierNotFound)
    assert isinstance(results[1].error, CodeNotFound)
    assert not isinstance(results[1].error, MalformedCode)


def test_decode_malformed_token(corpus_index):
    (result,) = decode_to_path(corpus_index, ["BCS102"])
    assert isinstance(result.error, MalformedCode)
    assert result.address is None


def test_decode_all_tiers(corpus_index):
    (result,) = decode_to_path(corpus_index, ["BCS01"], all_tiers=True)
    assert [f.tier for f in result.files] == [Tier.COMPLETE, Tier.SUMMARY, Tier.ABSTRACT, Tier.RULET]


def test_decode_section_alias(corpus_index):
    (a,) = decode_to_path(corpus_index, ["BCS0100"], Tier.COMPLETE)
    (b,) = decode_to_path(corpus_index, ["BCS01"], Tier.COMPLETE)
    assert a.paths == b.paths
    assert a.paths[0].name == "00-section.complete.md"


def test_decode_to_content(corpus_index):
    results = decode_to_content(corpus_index, ["BCS0102", "BCS0201"], Tier.SUMMARY)
    assert all(r.ok for r in results)
    assert results[0].content.startswith("### Shebang")

    joined = join_contents(results)
    assert joined.count(CONTENT_SEPARATOR) == 1
    assert join_contents(results[:1]) == results[0].content


def test_list_codes_is_sorted_and_reports_tiers(corpus_index):
    listings = list(list_codes(corpus_index))
    assert [listing.address for listing in listings] == corpus_index.addresses()
    first_section = listings[1]
    assert first_section.address == CodeAddress(1)
    assert Tier.RULET in first_section.tiers


def test_list_sections(corpus_index):
    sections = list_sections(corpus_index)
    assert [(s.number, s.title, s.directory) for s in sections] == [
        (1, "Script Structure", "01-script-structure"),
        (2, "Variables", "02-variables"),
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Layout (BCS0101)", "Layout"),
        ("BCS0102: Shebang", "Shebang"),
        ("1.2 Shebang", "Shebang"),
        ("[BCS01] Script Structure", "Script Structure"),
        ("Plain", "Plain"),
    ],
)
def test_clean_title(raw: str, expected: str):
    assert clean_title(raw) == expected


def test_decode_path(corpus_index, corpus_root: Path):
    path = corpus_root / "01-script-structure" / "02-shebang" / "01-env.summary.md"
    assert decode_path(corpus_index, path) == CodeAddress(1, 2, 1)
    assert decode_path(corpus_index, Path("01-script-structure/01-layout.complete.md")) == CodeAddress(1, 1)
    assert decode_path(corpus_index, corpus_root / "BASH-CODING-STANDARD.complete.md") is None


def test_search_hits_in_order(corpus_index):
    hits = list(search(corpus_index, "summary text"))
    assert len(hits) == 7
    assert all(h.path.name.endswith(".summary.md") for h in hits)
    assert hits[0].path.name == "00-header.summary.md"
    assert hits[0].line_number == 3


def test_search_options(corpus_index):
    assert list(search(corpus_index, "SHEBANG")) == []
    hits = list(search(corpus_index, "SHEBANG", ignore_case=True, tier=Tier.ABSTRACT))
    assert {h.path.name for h in hits} == {"02-shebang.abstract.md", "01-env.abstract.md"}

    # Fixed strings are not regexes
    assert list(search(corpus_index, "(BCS0101)", fixed=True))
    assert len(list(search(corpus_index, "[BCS0101]", fixed=True))) == 1


def test_search_context(corpus_index):
    (hit,) = search(corpus_index, "Declarations", tier=Tier.COMPLETE, context=2)
    assert hit.before == ()
    assert hit.after == ((2, ""), (3, "The complete text."))


def test_search_invalid_pattern(corpus_index):
    with pytest.raises(InvalidPattern):
        list(search(corpus_index, "([unclosed"))


def test_file_info(corpus_index):
    rule_file = corpus_index.get(CodeAddress(1, 2), Tier.COMPLETE)
    info = file_info(rule_file)
    assert info.basename == "02-shebang.complete.md"
    assert info.lines == 3
    assert info.title == "Shebang"
    assert info.size_bytes == rule_file.path.stat().st_size
    assert info.to_dict()["tier"] == "complete"


def test_resolve_all_request_via_front_end(corpus_index):
    (result,) = decode_to_path(corpus_index, ["BCS0102"], ALL)
    assert len(result.files) == 3


def test_decode_to_content_all_tiers(corpus_index):
    results = decode_to_content(corpus_index, ["BCS0102", "BCS9999"], all_tiers=True)
    assert [r.token for r in results] == ["BCS0102"] * 3 + ["BCS9999"]
    assert [r.file.tier for r in results[:3]] == [Tier.COMPLETE, Tier.SUMMARY, Tier.ABSTRACT]
    assert isinstance(results[3].error, CodeNotFound)

    joined = join_contents(results, headings=True)
    assert joined.startswith("Complete tier (BCS0102)\n\n### Shebang\n")
    assert "Abstract tier (BCS0102)\n\n### Shebang\n\nThe abstract text.\n" in joined
    assert joined.count(CONTENT_SEPARATOR) == 2


def test_decode_to_content_undecodable_bytes(corpus_root: Path, corpus_index):
    path = corpus_root / "02-variables" / "01-declarations.complete.md"
    path.write_bytes(b"### Declarations\n\xff\xfe bad\n")

    (result,) = decode_to_content(corpus_index, ["BCS0201"], Tier.COMPLETE)
    assert result.ok
    assert result.content.startswith("### Declarations\n")
    assert "�" in result.content
