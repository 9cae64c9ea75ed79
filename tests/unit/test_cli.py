"""
tests/unit/test_cli.py

Unit tests for docqa.cli.

The completion client is replaced by a stub (ask_file) or by patching
build_completion_client (main), so no credential or network is needed.

Coverage
--------
  - media_type_for(): extension mapping and fallback
  - ask_file(): answer written, intermediate directories created
  - ask_file(): missing input file → DocumentIOError, client never awaited
  - main(): exit 0 on success, 1 on validation/upstream failure
  - main(): missing credential → exit 1 before reading the input file
  - main(): -m/--model forwarded to the provider
  - main(): log events go to stderr, stdout holds only the result line
"""
from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from docqa.cli import ask_file, main, media_type_for
from docqa.errors import DocumentIOError, MissingCredentialError


def _raw(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _stub_client(raw: dict) -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(return_value=raw)
    client.aclose = AsyncMock()
    return client


class TestMediaTypeFor:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("notes.md", "text/markdown"),
            ("NOTES.MD", "text/markdown"),
            ("notes.markdown", "text/markdown"),
            ("notes.txt", "text/plain"),
            ("report.pdf", "application/pdf"),
            ("no_extension", "application/octet-stream"),
        ],
    )
    def test_mapping(self, name: str, expected: str) -> None:
        assert media_type_for(Path(name)) == expected


class TestAskFile:
    @pytest.mark.asyncio
    async def test_writes_answer_creating_directories(self, tmp_path: Path) -> None:
        source = tmp_path / "doc.md"
        source.write_text("# Title\nBody text.", encoding="utf-8")
        target = tmp_path / "out" / "nested" / "answer.md"
        client = _stub_client(_raw("  It does X.\n"))

        answer = await ask_file(client, "What does this do?", source, target)

        assert answer == "It does X."
        assert target.read_text(encoding="utf-8") == "It does X."

    @pytest.mark.asyncio
    async def test_missing_input_file(self, tmp_path: Path) -> None:
        client = _stub_client(_raw("unused"))

        with pytest.raises(DocumentIOError, match="input file not found"):
            await ask_file(client, "Q?", tmp_path / "missing.md", tmp_path / "a.md")

        client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_explicit_media_type_overrides_extension(self, tmp_path: Path) -> None:
        source = tmp_path / "doc.rst"
        source.write_text("Title\n=====", encoding="utf-8")
        client = _stub_client(_raw("Yes."))

        answer = await ask_file(
            client, "Q?", source, tmp_path / "a.md", media_type="text/plain"
        )

        assert answer == "Yes."


class TestMain:
    def test_success_exit_zero(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "doc.md"
        source.write_text("# Title\nBody text.", encoding="utf-8")
        target = tmp_path / "answer.md"
        client = _stub_client(_raw("It does X."))

        with patch("docqa.cli.build_completion_client", return_value=client):
            code = main(["What does this do?", str(source), str(target), "-m", "gpt-4o-mini"])

        assert code == 0
        assert target.read_text(encoding="utf-8") == "It does X."
        assert client.complete.await_args.args[1] == "gpt-4o-mini"
        client.aclose.assert_awaited_once()
        captured = capsys.readouterr()
        assert captured.out.strip() == f"Answer saved to {target}"
        assert "ask_answered" in captured.err

    def test_blank_question_exit_one(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "doc.md"
        source.write_text("# Title", encoding="utf-8")
        client = _stub_client(_raw("unused"))

        with patch("docqa.cli.build_completion_client", return_value=client):
            code = main(["   ", str(source), str(tmp_path / "a.md")])

        assert code == 1
        assert "missing question" in capsys.readouterr().err
        client.complete.assert_not_awaited()
        assert not (tmp_path / "a.md").exists()

    def test_unsupported_extension_exit_one(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "doc.pdf"
        source.write_bytes(b"%PDF-1.4")
        client = _stub_client(_raw("unused"))

        with patch("docqa.cli.build_completion_client", return_value=client):
            code = main(["Q?", str(source), str(tmp_path / "a.md")])

        assert code == 1
        assert "unsupported media type" in capsys.readouterr().err

    def test_empty_response_exit_one(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "doc.md"
        source.write_text("# Title", encoding="utf-8")
        client = _stub_client({"choices": []})

        with patch("docqa.cli.build_completion_client", return_value=client):
            code = main(["Q?", str(source), str(tmp_path / "a.md")])

        assert code == 1
        assert "empty response" in capsys.readouterr().err

    def test_missing_credential_exit_one(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "docqa.cli.build_completion_client",
            side_effect=MissingCredentialError("OPENAI_API_KEY environment variable is not set."),
        ):
            code = main(["Q?", str(tmp_path / "missing.md"), str(tmp_path / "a.md")])

        assert code == 1
        err = capsys.readouterr().err
        assert "OPENAI_API_KEY" in err
        assert "not found" not in err
