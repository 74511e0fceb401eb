"""CLI command tests."""

import json
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from sidecards.application.session import SideCardsSession
from sidecards.cli import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _patch_setup(monkeypatch, test_config):
    monkeypatch.setattr(
        "sidecards.cli_commands.shared.configure_logging",
        lambda *args, **kwargs: None,
    )
    monkeypatch.setattr(
        "sidecards.cli_commands.shared.get_logger", lambda name: MagicMock()
    )
    monkeypatch.setattr(
        "sidecards.cli_commands.shared.load_config", lambda path=None: test_config
    )


@pytest.fixture
def vault(test_config):
    return test_config.vault_path


def _seed(test_config, document: str, body: str, *texts: str) -> list[str]:
    """Create records owned by ``document`` and write it with their tokens."""
    with SideCardsSession(test_config) as session:
        ids = [session.store.create(document, text=text).id for text in texts]
    tokens = " ".join(f"&{record_id}" for record_id in ids)
    (test_config.vault_path / document).write_text(f"{body} {tokens}", encoding="utf-8")
    return ids


def test_create_inserts_token_and_record(runner, vault) -> None:
    (vault / "notes.md").write_text("Hello", encoding="utf-8")

    result = runner.invoke(app, ["create", "notes.md", "--text", "What is 2+2?"])

    assert result.exit_code == 0, result.output
    assert "Created" in result.output
    record_files = list((vault / "~card-data").glob("*.json"))
    assert len(record_files) == 1
    record = json.loads(record_files[0].read_text(encoding="utf-8"))
    assert record["text"] == "What is 2+2?"
    assert record["owner_path"] == "notes.md"
    assert (vault / "notes.md").read_text(encoding="utf-8") == f"Hello &{record['id']}"


def test_create_with_offset(runner, vault) -> None:
    (vault / "notes.md").write_text("Hello world", encoding="utf-8")

    result = runner.invoke(app, ["create", "notes.md", "--offset", "5"])

    assert result.exit_code == 0, result.output
    text = (vault / "notes.md").read_text(encoding="utf-8")
    assert text.startswith("Hello &") and text.endswith(" world")


def test_create_in_missing_document_fails(runner) -> None:
    result = runner.invoke(app, ["create", "missing.md"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_list_shows_records(runner, test_config) -> None:
    ids = _seed(test_config, "notes.md", "Body", "Zebra question", "Apple question")

    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0, result.output
    assert all(record_id in result.output for record_id in ids)
    assert "Flashcards (2)" in result.output


def test_list_sorted_alphabetically(runner, test_config) -> None:
    zebra, apple = _seed(test_config, "notes.md", "Body", "Zebra question", "Apple question")

    result = runner.invoke(app, ["list", "--sort", "alpha"])

    assert result.exit_code == 0, result.output
    assert result.output.index(apple) < result.output.index(zebra)


def test_list_empty_vault(runner) -> None:
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "No flashcards found" in result.output


def test_log_level_defaults_to_config(runner, monkeypatch, test_config) -> None:
    levels = []
    quiet = test_config.model_copy(update={"log_level": "WARNING"})
    monkeypatch.setattr("sidecards.cli_commands.shared.load_config", lambda path=None: quiet)
    monkeypatch.setattr(
        "sidecards.cli_commands.shared.configure_logging",
        lambda level, **kwargs: levels.append(level),
    )

    runner.invoke(app, ["list"])
    runner.invoke(app, ["list", "--log-level", "DEBUG"])

    assert levels == ["WARNING", "DEBUG"]


def test_scan_marks_dangling_tokens(runner, test_config, vault) -> None:
    (record_id,) = _seed(test_config, "notes.md", "See &abc123 and", "Question")

    result = runner.invoke(app, ["scan", "notes.md"])

    assert result.exit_code == 0, result.output
    assert record_id in result.output
    assert "abc123" in result.output
    assert "dangling" in result.output


def test_view_lists_cards_in_token_order(runner, test_config) -> None:
    _seed(test_config, "notes.md", "Body", "First card", "Second card")

    result = runner.invoke(app, ["view", "notes.md"])

    assert result.exit_code == 0, result.output
    assert result.output.index("First card") < result.output.index("Second card")


def test_update_changes_text(runner, test_config, vault) -> None:
    (record_id,) = _seed(test_config, "notes.md", "Body", "Old text")

    result = runner.invoke(app, ["update", record_id, "--text", "New text"])

    assert result.exit_code == 0, result.output
    record = json.loads((vault / "~card-data" / f"{record_id}.json").read_text(encoding="utf-8"))
    assert record["text"] == "New text"


def test_update_requires_a_change(runner, test_config) -> None:
    (record_id,) = _seed(test_config, "notes.md", "Body", "Old text")

    result = runner.invoke(app, ["update", record_id])

    assert result.exit_code == 1


def test_delete_removes_record_and_tokens(runner, test_config, vault) -> None:
    keep, drop = _seed(test_config, "notes.md", "Body", "Keep", "Drop")

    result = runner.invoke(app, ["delete", drop])

    assert result.exit_code == 0, result.output
    assert not (vault / "~card-data" / f"{drop}.json").exists()
    text = (vault / "notes.md").read_text(encoding="utf-8")
    assert drop not in text
    assert f"&{keep}" in text


def test_delete_unknown_record(runner) -> None:
    result = runner.invoke(app, ["delete", "zzzzzz"])

    assert result.exit_code == 1
    assert "Flashcard not found" in result.output


def test_reclaim_dry_run_changes_nothing(runner, test_config, vault) -> None:
    _seed(test_config, "notes.md", "Body", "Referenced")
    with SideCardsSession(test_config) as session:
        orphan = session.store.create("notes.md", text="Orphan").id

    result = runner.invoke(app, ["reclaim", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "dry run" in result.output
    assert orphan in result.output
    assert (vault / "~card-data" / f"{orphan}.json").exists()


def test_reclaim_deletes_orphans_and_dangling_tokens(runner, test_config, vault) -> None:
    (kept,) = _seed(test_config, "notes.md", "See &abc123", "Referenced")
    with SideCardsSession(test_config) as session:
        orphan = session.store.create("notes.md", text="Orphan").id

    result = runner.invoke(app, ["reclaim"])

    assert result.exit_code == 0, result.output
    assert not (vault / "~card-data" / f"{orphan}.json").exists()
    assert (vault / "~card-data" / f"{kept}.json").exists()
    assert "&abc123" not in (vault / "notes.md").read_text(encoding="utf-8")
