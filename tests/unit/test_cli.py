"""Tests for the ``resolve`` CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from encryptionprovider.cli.main import cli

_ANNOTATION = "encryption.apiserver.operator.openshift.io/managed-by"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("ENCPROVIDER_"):
            monkeypatch.delenv(key)


def _write_secret(tmp_path: Path, annotations: dict[str, str] | None = None, **metadata: str) -> Path:
    path = tmp_path / "secret.json"
    meta = {"name": "encryption-config-openshift-oauth-apiserver", "annotations": annotations or {}}
    meta.update(metadata)
    path.write_text(json.dumps({"apiVersion": "v1", "kind": "Secret", "metadata": meta}))
    return path


def _first_line_json(output: str) -> list[str]:
    return json.loads(output.splitlines()[0])


class TestResolve:
    def test_not_found_prints_full_default_list(self) -> None:
        result = CliRunner().invoke(cli, ["resolve"])
        assert result.exit_code == 0, result.output
        assert _first_line_json(result.output) == [
            "routes.route.openshift.io",
            "oauthaccesstokens.oauth.openshift.io",
            "oauthauthorizetokens.oauth.openshift.io",
        ]

    def test_secret_without_annotation_reduces(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, ["resolve", "--secret-file", str(_write_secret(tmp_path))])
        assert result.exit_code == 0, result.output
        assert _first_line_json(result.output) == ["routes.route.openshift.io"]

    def test_annotated_secret_keeps_full_list(self, tmp_path: Path) -> None:
        path = _write_secret(tmp_path, annotations={_ANNOTATION: ""})
        result = CliRunner().invoke(cli, ["resolve", "--secret-file", str(path)])
        assert len(_first_line_json(result.output)) == 3

    def test_explicit_lists(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "resolve",
                "--secret-file",
                str(_write_secret(tmp_path)),
                "--gr",
                "secrets",
                "--gr",
                "oauthaccesstokens.oauth.openshift.io",
                "--external",
                "oauthaccesstokens.oauth.openshift.io",
            ],
        )
        assert result.exit_code == 0, result.output
        assert _first_line_json(result.output) == ["secrets"]

    def test_secret_in_other_namespace_is_not_found(self, tmp_path: Path) -> None:
        path = _write_secret(tmp_path, namespace="default")
        result = CliRunner().invoke(cli, ["resolve", "--secret-file", str(path)])
        assert len(_first_line_json(result.output)) == 3

    def test_verbose_reports_mode_and_event(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, ["resolve", "--secret-file", str(_write_secret(tmp_path)), "-v"])
        assert result.exit_code == 0, result.output
        assert "mode: delegated" in result.output
        assert "event: EncryptedGRsChanged" in result.output

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "secret.json"
        path.write_text("{not json")
        result = CliRunner().invoke(cli, ["resolve", "--secret-file", str(path)])
        assert result.exit_code != 0
        assert "not valid JSON" in result.output

    def test_null_metadata_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "secret.json"
        path.write_text(json.dumps({"apiVersion": "v1", "kind": "Secret", "metadata": None}))
        result = CliRunner().invoke(cli, ["resolve", "--secret-file", str(path)])
        assert result.exit_code == 2
        assert "metadata must be an object" in result.output
        assert not isinstance(result.exception, AttributeError)

    def test_invalid_group_resource(self) -> None:
        result = CliRunner().invoke(cli, ["resolve", "--gr", ".apps"])
        assert result.exit_code != 0
