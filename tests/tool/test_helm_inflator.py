"""Tests for the helm-inflator command line tool."""

from pathlib import Path

import pytest
import yaml

from helm_inflator.tool.helm_inflator import main


def test_generate(fake_helm: Path, tmp_path: Path) -> None:
    """Test generating manifests from a config file."""
    config_file = tmp_path / "generator.yaml"
    config_file.write_text(
        yaml.dump(
            {
                "apiVersion": "builtin",
                "kind": "HelmChartInflationGenerator",
                "metadata": {"name": "nginx"},
                "chartName": "nginx",
                "chartRepoUrl": "https://charts.example.com",
                "helmBin": str(fake_helm),
            }
        )
    )
    output_file = tmp_path / "output.yaml"

    main(["generate", str(config_file), "--output-file", str(output_file)])

    docs = list(yaml.safe_load_all(output_file.read_text()))
    assert [doc["kind"] for doc in docs] == ["ConfigMap", "Deployment"]


def test_generate_missing_chart_name(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test an invalid config exits with an error."""
    config_file = tmp_path / "generator.yaml"
    config_file.write_text("releaseName: web\n")

    with pytest.raises(SystemExit) as exc_info:
        main(["generate", str(config_file)])

    assert exc_info.value.code == 1
    assert "chartName cannot be empty" in capsys.readouterr().err


def test_generate_helm_failure(
    fake_helm: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test a helm failure exits with helm's error output."""
    monkeypatch.setenv("FAKE_HELM_FAIL", "pull")
    config_file = tmp_path / "generator.yaml"
    config_file.write_text(f"chartName: nginx\nhelmBin: {fake_helm}\n")

    with pytest.raises(SystemExit) as exc_info:
        main(["generate", str(config_file), "--output-file", str(tmp_path / "out")])

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "helm-inflator error:" in err
    assert "Error: pull failed" in err


def test_version(fake_helm: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test printing the helm version."""
    main(["version", "--helm-bin", str(fake_helm)])
    assert capsys.readouterr().out == "v3.14.2\n"


def test_version_unsupported(
    fake_helm: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test an unsupported helm version exits with an error."""
    monkeypatch.setenv("FAKE_HELM_VERSION", "v4.0.1")
    with pytest.raises(SystemExit) as exc_info:
        main(["version", "--helm-bin", str(fake_helm)])
    assert exc_info.value.code == 1
    assert "requires helm v3 but got v4.0.1" in capsys.readouterr().err
