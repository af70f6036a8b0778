import textwrap
from pathlib import Path

import pytest
import typer
from pytest_mock import MockerFixture

from versolve.cli.commands.solve_cmd import do_solve
from versolve.registry.lock_file import parse_lock_file
from versolve.solver.version import Version

REGISTRY_TOML = textwrap.dedent("""\
    compiler = "0.19.1"

    [[package]]
    name = "B"
    version = "1.0.0"

    [[package]]
    name = "B"
    version = "1.0.1"

    [[package]]
    name = "B"
    version = "1.0.2"

    [[package]]
    name = "B"
    version = "1.0.3"

    [[package]]
    name = "C"
    version = "1.0.0"
    compiler = "0.19.0 <= v < 0.20.0"

    [package.dependencies]
    B = "1.0.1 <= v < 1.0.3"
""")

MANIFEST_TOML = textwrap.dedent("""\
    [dependencies]
    C = "1.0.0 <= v < 2.0.0"

    [test-dependencies]
    B = "1.0.0 <= v < 1.0.4"
""")


class TestSolveCmd:
    """Tests for the versolve.cli.commands.solve_cmd module."""

    @pytest.fixture(autouse=True)
    def _isolate_settings(self, tmp_path: Path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch) -> None:
        config_dir = tmp_path / ".versolve"
        mocker.patch("versolve.config.settings.CONFIG_DIR", config_dir)
        mocker.patch("versolve.config.settings.SETTINGS_PATH", config_dir / "settings")
        monkeypatch.delenv("VERSOLVE_COMPILER_VERSION", raising=False)
        monkeypatch.delenv("VERSOLVE_MAX_STEPS", raising=False)

    @pytest.fixture
    def project(self, tmp_path: Path) -> tuple[Path, Path]:
        manifest = tmp_path / "project.toml"
        manifest.write_text(MANIFEST_TOML)
        registry = tmp_path / "registry.toml"
        registry.write_text(REGISTRY_TOML)
        return manifest, registry

    def test_solve_writes_lock_file(self, project: tuple[Path, Path], tmp_path: Path):
        manifest, registry = project
        lock = tmp_path / "versolve.lock"

        do_solve(manifest=manifest, registry=registry, lock=lock)

        assert parse_lock_file(lock.read_text(encoding="utf-8")) == {"B": Version(1, 0, 2), "C": Version(1, 0, 0)}

    def test_solve_prints_solution(self, project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]):
        manifest, registry = project
        do_solve(manifest=manifest, registry=registry)
        assert "1.0.2" in capsys.readouterr().err

    def test_solve_without_test_dependencies(self, project: tuple[Path, Path], tmp_path: Path):
        manifest, registry = project
        manifest.write_text('[dependencies]\nB = "1.0.0 <= v < 2.0.0"\n\n[test-dependencies]\nC = "1.0.0 <= v < 2.0.0"\n')
        lock = tmp_path / "versolve.lock"

        do_solve(manifest=manifest, registry=registry, include_test=False, lock=lock)

        assert parse_lock_file(lock.read_text(encoding="utf-8")) == {"B": Version(1, 0, 3)}

    def test_incompatible_compiler_exits(self, project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]):
        manifest, registry = project
        with pytest.raises(typer.Exit) as exc_info:
            do_solve(manifest=manifest, registry=registry, compiler="0.18.0")
        assert exc_info.value.exit_code == 1
        assert "No compatible versions" in capsys.readouterr().err

    def test_step_budget_exits(self, project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]):
        manifest, registry = project
        with pytest.raises(typer.Exit):
            do_solve(manifest=manifest, registry=registry, max_steps=1)
        assert "Gave up after 1 steps" in capsys.readouterr().err

    def test_step_budget_from_settings(self, project: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch):
        manifest, registry = project
        monkeypatch.setenv("VERSOLVE_MAX_STEPS", "1")
        with pytest.raises(typer.Exit):
            do_solve(manifest=manifest, registry=registry)

    def test_zero_max_steps_disables_budget(self, project: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch):
        manifest, registry = project
        monkeypatch.setenv("VERSOLVE_MAX_STEPS", "1")
        do_solve(manifest=manifest, registry=registry, max_steps=0)

    def test_invalid_compiler_flag(self, project: tuple[Path, Path]):
        manifest, registry = project
        with pytest.raises(typer.Exit):
            do_solve(manifest=manifest, registry=registry, compiler="nineteen")

    def test_invalid_manifest(self, project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]):
        manifest, registry = project
        manifest.write_text('[dependencies]\nC = "^1.0.0"\n')
        with pytest.raises(typer.Exit):
            do_solve(manifest=manifest, registry=registry)
        assert "Invalid range for 'C'" in capsys.readouterr().err

    def test_missing_registry(self, project: tuple[Path, Path], tmp_path: Path):
        manifest, _ = project
        with pytest.raises(typer.Exit):
            do_solve(manifest=manifest, registry=tmp_path / "missing.toml")

    def test_flags_bypass_broken_settings(self, project: tuple[Path, Path], tmp_path: Path):
        manifest, registry = project
        settings_path = tmp_path / ".versolve" / "settings"
        settings_path.parent.mkdir()
        settings_path.write_text("VERSOLVE_MAX_STEPS=lots\nVERSOLVE_COMPILER_VERSION=latest\n", encoding="utf-8")
        lock = tmp_path / "versolve.lock"

        do_solve(manifest=manifest, registry=registry, compiler="0.19.1", max_steps=10, lock=lock)

        assert parse_lock_file(lock.read_text(encoding="utf-8")) == {"B": Version(1, 0, 2), "C": Version(1, 0, 0)}

    def test_broken_step_setting_is_reported(self, project: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]):
        manifest, registry = project
        monkeypatch.setenv("VERSOLVE_MAX_STEPS", "lots")
        with pytest.raises(typer.Exit):
            do_solve(manifest=manifest, registry=registry, compiler="0.19.1")
        assert "Invalid max-steps value 'lots'" in capsys.readouterr().err
