from __future__ import annotations

from pathlib import Path

import pytest

from linkresolver.document import DocumentError
from linkresolver.services import ConversationalResolver, ResolutionSession
from stubs import ScriptedInteraction, StubChatClient, reply


def make_session(replies, commands):
    chat = StubChatClient(replies)
    interaction = ScriptedInteraction(commands)
    resolver = ConversationalResolver(chat, interaction)
    return ResolutionSession(resolver, interaction), chat, interaction


def test_resolve_text_patches_only_unresolved_links() -> None:
    session, chat, interaction = make_session(
        [reply("https://found.example/x", 0.95)], ["y"]
    )

    outcome = session.resolve_text("See [X](my query) and [Y](https://a.com/b).")

    assert outcome.text == "See [X](https://found.example/x) and [Y](https://a.com/b)."
    assert [candidate.resolved_url for candidate in outcome.settled] == [
        "https://found.example/x",
        "https://a.com/b",
    ]
    assert len(chat.calls) == 1
    assert interaction.begun == [("X", 1, 2)]
    assert "Found 2 links to process." in interaction.notices
    assert "Link 2: [Y](https://a.com/b) - Already a URL, skipping" in interaction.notices
    assert interaction.summaries == [["X", "Y"]]


def test_skipped_links_keep_their_markup() -> None:
    session, _chat, _interaction = make_session(
        [reply("https://one.example"), reply("https://two.example")], ["y"]
    )
    text = "First [a](alpha docs). Then [b](beta docs)!"

    outcome = session.resolve_text(text)

    assert outcome.text == "First [a](https://one.example). Then [b](beta docs)!"
    assert [candidate.label for candidate in outcome.skipped] == ["b"]


def test_process_file_writes_output_once(tmp_path: Path) -> None:
    source = tmp_path / "notes.md"
    source.write_text("Read the [guide](packaging tutorial).\n", encoding="utf-8")
    target = tmp_path / "out.md"
    session, _chat, interaction = make_session([reply("https://packaging.example")], ["y"])

    outcome = session.process_file(source, target)

    assert outcome.output_path == target
    assert target.read_text(encoding="utf-8") == (
        "Read the [guide](https://packaging.example).\n"
    )
    assert source.read_text(encoding="utf-8") == "Read the [guide](packaging tutorial).\n"
    assert f"Output written to: {target}" in interaction.notices


def test_process_file_in_place(tmp_path: Path) -> None:
    source = tmp_path / "notes.md"
    source.write_text("Use [it](the tool)\r\nok\r\n", encoding="utf-8")
    session, _chat, interaction = make_session([reply("https://tool.example")], ["y"])

    session.process_file(source, in_place=True)

    assert source.read_bytes() == b"Use [it](https://tool.example)\r\nok\r\n"
    assert f"File updated in-place: {source}" in interaction.notices


def test_process_file_keeps_detected_encoding(tmp_path: Path) -> None:
    source = tmp_path / "latin.txt"
    original = (
        "Le café est décrit dans [la page](guide du café parisien). Très bien.\n"
        "Les élèves préfèrent le thé glacé à côté de la fenêtre en été.\n"
        "Déjà réservé pour la soirée: crème brûlée, pâté et bière fraîche.\n"
    )
    source.write_bytes(original.encode("latin-1"))
    session, _chat, _interaction = make_session([reply("https://cafe.example")], ["y"])

    outcome = session.process_file(source, in_place=True)

    assert outcome.text is not None
    written = source.read_bytes()
    with pytest.raises(UnicodeDecodeError):
        written.decode("utf-8")
    assert b"[la page](https://cafe.example)" in written


def test_document_without_links_is_not_written(tmp_path: Path) -> None:
    source = tmp_path / "plain.md"
    source.write_text("Nothing to see here.", encoding="utf-8")
    target = tmp_path / "out.md"
    session, chat, interaction = make_session([], [])

    outcome = session.process_file(source, target)

    assert outcome.found_links is False
    assert outcome.text is None
    assert not target.exists()
    assert chat.calls == []
    assert interaction.notices == ["No links found to process."]


def test_missing_input_raises_document_error(tmp_path: Path) -> None:
    session, _chat, _interaction = make_session([], [])

    with pytest.raises(DocumentError, match="failed to read input file"):
        session.process_file(tmp_path / "missing.md", tmp_path / "out.md")


def test_output_is_required_without_in_place(tmp_path: Path) -> None:
    session, _chat, _interaction = make_session([], [])

    with pytest.raises(ValueError):
        session.process_file(tmp_path / "notes.md")
