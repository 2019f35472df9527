"""Tests for the command-line entry point."""

import io
import json

import pytest

import generate_patient_document as cli
from patient_document_generation import PatientDocumentPipeline
from patient_document_generation.core.constants import SECTION_SEPARATOR


@pytest.fixture
def run_cli(clean_env, tmp_path, fake_llm):
    """Run ``main`` with a gemini key set and a scripted backend."""
    clean_env.chdir(tmp_path)
    clean_env.setenv("GEMINI_API_KEY", "test-key")
    clean_env.setenv("RATE_LIMIT_DELAY", "0")
    clean_env.setattr(cli, "setup_logging", lambda level: None)

    def _run(argv, structured=None):
        client = fake_llm(structured=structured)
        clean_env.setattr(
            cli,
            "PatientDocumentPipeline",
            lambda configuration: PatientDocumentPipeline(configuration, llm_client=client),
        )
        return cli.main(argv), client

    return _run


@pytest.fixture
def note_file(tmp_path, technical_note):
    path = tmp_path / "note.txt"
    path.write_text(technical_note, encoding="utf-8")
    return path


class TestSuccess:
    def test_json_response_on_stdout(self, run_cli, note_file, valid_document, capsys):
        code, _ = run_cli(["--note", str(note_file)], structured=[valid_document])

        assert code == cli.EXIT_SUCCESS
        response = json.loads(capsys.readouterr().out)
        assert response["document"] == valid_document
        assert response["validation"] == {"passed": True, "warnings": []}

    def test_text_format_uses_localized_titles(
        self, run_cli, note_file, tmp_path, valid_document, capsys
    ):
        profile = tmp_path / "profile.json"
        profile.write_text(json.dumps({"language": "english", "age": 72}), encoding="utf-8")

        code, _ = run_cli(
            ["--note", str(note_file), "--profile", str(profile), "--format", "text"],
            structured=[valid_document],
        )

        out = capsys.readouterr().out
        assert code == cli.EXIT_SUCCESS
        assert out.startswith(f"{SECTION_SEPARATOR}\nWHAT DO I HAVE\n")
        assert "MY CONTACTS" in out

    def test_output_file(self, run_cli, note_file, tmp_path, valid_document):
        output = tmp_path / "out.json"
        code, _ = run_cli(
            ["--note", str(note_file), "--output", str(output)], structured=[valid_document]
        )
        assert code == cli.EXIT_SUCCESS
        assert json.loads(output.read_text(encoding="utf-8"))["document"] == valid_document

    def test_note_from_stdin(self, run_cli, technical_note, valid_document, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(technical_note))
        code, client = run_cli([], structured=[valid_document])
        assert code == cli.EXIT_SUCCESS
        assert technical_note in client.user_prompts[0]


class TestFailures:
    def test_validation_failure_exits_one(self, run_cli, note_file, valid_document, capsys):
        invalid = dict(valid_document, warning_signs="See a doctor if you feel unwell.")
        code, client = run_cli(["--note", str(note_file)], structured=[invalid, invalid])

        response = json.loads(capsys.readouterr().out)
        assert code == cli.EXIT_FAILURE
        assert response["failureKind"] == "validation_exhausted"
        assert len(client.calls) == 2

    def test_text_format_falls_back_to_json_on_failure(self, run_cli, tmp_path, capsys):
        note = tmp_path / "empty.txt"
        note.write_text("", encoding="utf-8")
        code, _ = run_cli(["--note", str(note), "--format", "text"])

        assert code == cli.EXIT_FAILURE
        assert json.loads(capsys.readouterr().out)["failureKind"] == "invalid_input"

    def test_missing_note_file(self, run_cli, tmp_path):
        code, client = run_cli(["--note", str(tmp_path / "missing.txt")])
        assert code == cli.EXIT_FAILURE
        assert client.calls == []

    def test_profile_must_be_an_object(self, run_cli, note_file, tmp_path):
        profile = tmp_path / "profile.json"
        profile.write_text("[1, 2]", encoding="utf-8")
        code, _ = run_cli(["--note", str(note_file), "--profile", str(profile)])
        assert code == cli.EXIT_FAILURE


class TestConfiguration:
    def test_missing_key_exits_two(self, run_cli, note_file, clean_env):
        clean_env.delenv("GEMINI_API_KEY")
        code, client = run_cli(["--note", str(note_file)])
        assert code == cli.EXIT_CONFIGURATION_ERROR
        assert client.calls == []

    def test_provider_override_requires_its_key(self, run_cli, note_file):
        code, _ = run_cli(["--note", str(note_file), "--provider", "openai"])
        assert code == cli.EXIT_CONFIGURATION_ERROR

    def test_load_configuration_applies_overrides(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("OPENAI_API_KEY", "o-key")
        clean_env.setenv("GEMINI_API_KEY", "g-key")
        args = cli.create_argument_parser().parse_args(
            ["--provider", "openai", "--log-level", "debug"]
        )
        configuration = cli.load_configuration(args)
        assert configuration.llm_provider == "openai"
        assert configuration.log_level == "DEBUG"
