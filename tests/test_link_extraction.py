from __future__ import annotations

import pytest

from linkresolver.document import Settled, Unresolved, extract_links, is_url


SCENARIO = "See [X](my query) and [Y](https://a.com/b)."


def test_extracts_candidates_in_document_order_with_spans() -> None:
    candidates = extract_links(SCENARIO)

    assert [(c.label, c.description) for c in candidates] == [
        ("X", "my query"),
        ("Y", "https://a.com/b"),
    ]
    first, second = candidates
    assert (first.span.start, first.span.end) == (4, 17)
    assert SCENARIO[first.span.start : first.span.end] == "[X](my query)"
    assert SCENARIO[second.span.start : second.span.end] == "[Y](https://a.com/b)"
    assert first.state == Unresolved()
    assert first.resolved_url is None
    assert first.confidence == 0.0


def test_url_descriptions_are_settled_immediately() -> None:
    second = extract_links(SCENARIO)[1]

    assert second.state == Settled("https://a.com/b", 1.0)
    assert second.resolved_url == "https://a.com/b"
    assert second.confidence == 1.0
    assert second.transcript.is_empty


@pytest.mark.parametrize(
    "description",
    ["http://example.com", "https://example.com/x?y=1", "ftp://files.example.com/a"],
)
def test_supported_schemes_short_circuit(description: str) -> None:
    (candidate,) = extract_links(f"Grab [it]({description}).")

    assert candidate.is_settled
    assert candidate.resolved_url == description


@pytest.mark.parametrize("value", ["www.example.com", "example.com", "mailto:a@b.c", "HTTP://x"])
def test_is_url_is_a_plain_prefix_test(value: str) -> None:
    assert not is_url(value)


def test_extraction_is_idempotent() -> None:
    text = "A [a](one). B [b](two)! C [c](https://c.example) and [d](four)?"

    first = [c.span for c in extract_links(text)]
    second = [c.span for c in extract_links(text)]

    assert first == second
    assert len(first) == 4


def test_spans_are_sorted_and_do_not_overlap() -> None:
    text = "[a](1)[b](2) text [c](3)\n[d](4)"

    spans = [c.span for c in extract_links(text)]

    assert spans == sorted(spans, key=lambda span: span.start)
    for left, right in zip(spans, spans[1:]):
        assert left.end <= right.start
        assert not left.overlaps(right)
    assert all(span.start < span.end for span in spans)


def test_nested_and_malformed_constructs_do_not_match() -> None:
    assert extract_links("[x](y (z))") == []
    assert extract_links("[](empty) and [label]()") == []
    assert extract_links("[broken](no close") == []
    assert extract_links("[multi\nline](desc)") == []

    (inner,) = extract_links("[outer [inner](target)")
    assert inner.label == "inner"
    assert inner.description == "target"


def test_image_syntax_is_ignored() -> None:
    candidates = extract_links("![diagram](architecture sketch) then [docs](the manual)")

    assert [c.label for c in candidates] == ["docs"]


def test_candidates_carry_sentence_context() -> None:
    text = "Intro here. Install it with [pip](python package installer docs) today! Done."

    (candidate,) = extract_links(text)

    assert candidate.sentence_context == (
        "Install it with [pip](python package installer docs) today!"
    )
