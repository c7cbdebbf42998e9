# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the annotation CLI."""

import io
import json
from pathlib import Path

import httpx
import pytest

import cli.annotate_cli as annotate_cli
from cli.annotate_cli import run
from rca.github import GitHubClient
from rca.llm_client import GenerationError, LLMClient


class _FakeLLMClient(LLMClient):
    def __init__(self, response: str = "[]", fail: bool = False) -> None:
        self._response = response
        self._fail = fail
        self.prompts: list[str] = []

    def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        self.prompts.append(prompt)
        if self._fail:
            raise GenerationError("provider unavailable")
        return self._response


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _source(total_lines: int) -> str:
    return "\n".join(f"value_{line} = {line}" for line in range(1, total_lines + 1))


def _github_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "raw.githubusercontent.com":
        return httpx.Response(200, text=_source(30))
    if request.url.path == "/repos/octo/demo":
        return httpx.Response(200, json={"default_branch": "main", "stargazers_count": 1})
    if request.url.path == "/repos/octo/demo/git/trees/main":
        return httpx.Response(
            200, json={"tree": [{"path": "src/app.py", "type": "blob", "size": 400}]}
        )
    return httpx.Response(404)


@pytest.fixture
def fake_llm(monkeypatch: pytest.MonkeyPatch) -> _FakeLLMClient:
    client = _FakeLLMClient(
        response='[{"lineStart": 1, "lineEnd": 4, "annotation": "Setup", "type": "info"}]'
    )
    monkeypatch.setattr(annotate_cli, "build_llm_client", lambda **kwargs: client)
    monkeypatch.setattr(
        annotate_cli,
        "build_github_client",
        lambda: GitHubClient(http_client=httpx.Client(transport=httpx.MockTransport(_github_handler))),
    )
    return client


def test_ph14_cli_001_requires_a_command() -> None:
    assert run([], stdout=io.StringIO(), stderr=io.StringIO()) == 2
    assert run(["reconcile"], stdout=io.StringIO(), stderr=io.StringIO()) == 2


def test_ph14_cli_002_reconcile_fails_when_path_is_missing(tmp_path: Path) -> None:
    stderr = io.StringIO()

    exit_code = run(
        [
            "reconcile",
            "--response",
            str(tmp_path / "missing.txt"),
            "--source",
            str(tmp_path / "app.py"),
        ],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Path does not exist" in stderr.getvalue()


def test_ph14_cli_003_reconcile_writes_json_output(tmp_path: Path) -> None:
    response_path = tmp_path / "response.txt"
    source_path = tmp_path / "app.py"
    output_path = tmp_path / "out" / "result.json"
    _write_file(response_path, "garbage without any json")
    _write_file(source_path, _source(50))

    exit_code = run(
        [
            "reconcile",
            "--response",
            str(response_path),
            "--source",
            str(source_path),
            "--format",
            "json",
            "--output",
            str(output_path),
        ],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )

    payload = json.loads(output_path.read_text(encoding="utf-8"))
    file_payload = payload["files"][0]
    assert exit_code == 0
    assert file_payload["fileName"] == "app.py"
    assert file_payload["parseMode"] == "fallback"
    assert len(file_payload["annotations"]) == 5
    assert file_payload["coverageReport"]["totalLines"] == 50


def test_ph14_cli_004_reconcile_table_output(tmp_path: Path) -> None:
    response_path = tmp_path / "response.txt"
    source_path = tmp_path / "app.py"
    _write_file(
        response_path,
        '[{"lineStart":1,"lineEnd":40,"annotation":"Everything","type":"important"}]',
    )
    _write_file(source_path, _source(40))
    stdout = io.StringIO()

    exit_code = run(
        ["reconcile", "--response", str(response_path), "--source", str(source_path)],
        stdout=stdout,
        stderr=io.StringIO(),
    )

    assert exit_code == 0
    assert "app.py" in stdout.getvalue()
    assert "mode=strict" in stdout.getvalue()
    assert "coverage=100.0%" in stdout.getvalue()


def test_ph14_cli_005_annotate_file_prints_json(
    tmp_path: Path, fake_llm: _FakeLLMClient
) -> None:
    source_path = tmp_path / "app.py"
    _write_file(source_path, _source(20))
    stdout = io.StringIO()

    exit_code = run(
        ["annotate-file", "--path", str(source_path), "--format", "json"],
        stdout=stdout,
        stderr=io.StringIO(),
    )

    payload = json.loads(stdout.getvalue())
    assert exit_code == 0
    assert payload["files"][0]["status"] == "success"
    assert payload["files"][0]["annotations"][0]["annotation"] == "Setup"
    assert "Analyze this 20-line file" in fake_llm.prompts[0]


def test_ph14_cli_006_annotate_file_from_github_url(
    tmp_path: Path, fake_llm: _FakeLLMClient
) -> None:
    output_path = tmp_path / "result.json"

    exit_code = run(
        [
            "annotate-file",
            "--url",
            "https://github.com/octo/demo/blob/main/src/app.py",
            "--format",
            "json",
            "--output",
            str(output_path),
        ],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )

    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert exit_code == 0
    assert payload["files"][0]["fileName"] == "app.py"
    assert payload["files"][0]["coverageReport"]["totalLines"] == 30


def test_ph14_cli_007_annotate_file_reports_provider_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        annotate_cli, "build_llm_client", lambda **kwargs: _FakeLLMClient(fail=True)
    )
    source_path = tmp_path / "main.go"
    _write_file(source_path, _source(12))
    stderr = io.StringIO()

    exit_code = run(
        ["annotate-file", "--path", str(source_path)],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 0
    assert "annotation_error: provider unavailable" in stderr.getvalue()


def test_ph14_cli_008_annotate_repo_uses_sqlite_cache(
    tmp_path: Path, fake_llm: _FakeLLMClient
) -> None:
    cache_db = tmp_path / "cache.sqlite"
    outputs = [tmp_path / "first.json", tmp_path / "second.json"]

    exit_codes = [
        run(
            [
                "annotate-repo",
                "--url",
                "https://github.com/octo/demo",
                "--cache-db",
                str(cache_db),
                "--format",
                "json",
                "--output",
                str(output_path),
            ],
            stdout=io.StringIO(),
            stderr=io.StringIO(),
        )
        for output_path in outputs
    ]

    first, second = (json.loads(path.read_text(encoding="utf-8")) for path in outputs)
    assert exit_codes == [0, 0]
    assert first["fromCache"] is False
    assert second["fromCache"] is True
    assert list(second["annotations"]) == ["src/app.py"]
    assert len(fake_llm.prompts) == 1


def test_ph14_cli_009_annotate_repo_rejects_invalid_url(fake_llm: _FakeLLMClient) -> None:
    stderr = io.StringIO()

    exit_code = run(
        ["annotate-repo", "--url", "https://example.com/nothing"],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Repository annotation failed" in stderr.getvalue()


def test_ph14_cli_010_annotate_repo_rejects_invalid_worker_count() -> None:
    stderr = io.StringIO()

    exit_code = run(
        ["annotate-repo", "--url", "https://github.com/octo/demo", "--max-workers", "0"],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 2
    assert "must be > 0" in stderr.getvalue()


def test_ph14_cli_011_analyze_section_prints_answer(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    client = _FakeLLMClient(response="It assigns constants.")
    monkeypatch.setattr(annotate_cli, "build_llm_client", lambda **kwargs: client)
    source_path = tmp_path / "app.py"
    _write_file(source_path, _source(10))
    stdout = io.StringIO()

    exit_code = run(
        [
            "analyze-section",
            "--path",
            str(source_path),
            "--line-start",
            "2",
            "--line-end",
            "3",
            "--question",
            "What happens here?",
        ],
        stdout=stdout,
        stderr=io.StringIO(),
    )

    assert exit_code == 0
    assert "It assigns constants." in stdout.getvalue()
    assert "value_2 = 2\nvalue_3 = 3" in client.prompts[0]
    assert "Question: What happens here?" in client.prompts[0]


def test_ph14_cli_012_analyze_section_rejects_inverted_range(tmp_path: Path) -> None:
    source_path = tmp_path / "app.py"
    _write_file(source_path, _source(10))
    stderr = io.StringIO()

    exit_code = run(
        ["analyze-section", "--path", str(source_path), "--line-start", "5", "--line-end", "2"],
        stdout=io.StringIO(),
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Invalid section input" in stderr.getvalue()
