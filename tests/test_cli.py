"""
Command line and configuration tests.
"""

import pytest

from spoon import cli
from spoon.config import load_config
from spoon.src.spoon_errors import UnhandledNodeType

ENV_VARS = ["SPOON_OUTPUT_DIR", "SPOON_OUTPUT_EXTENSION", "SPOON_LOG_LEVEL"]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # setenv then delenv so anything a .env file loads is removed afterwards
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_writes_compiled_class(clean_env, tmp_path):
    source = write(tmp_path / "hello_world.spoon", "x = 1\n")
    out_dir = tmp_path / "build"

    assert cli.main([str(source), "--out_dir", str(out_dir)]) == 0

    output = (out_dir / "HelloWorld.hx").read_text(encoding="utf-8")
    assert "class HelloWorld {" in output
    assert "    var x = 1;" in output


def test_stdout(clean_env, tmp_path, capsys):
    source = write(tmp_path / "main.spoon", "print('hi')\n")

    assert cli.main([str(source), "--stdout"]) == 0

    assert "class Main {" in capsys.readouterr().out
    assert not (tmp_path / "Main.hx").exists()


def test_syntax_error_exit_code(clean_env, tmp_path):
    source = write(tmp_path / "broken.spoon", "x = )\n")

    assert cli.main([str(source)]) == 1
    assert not (tmp_path / "Broken.hx").exists()


def test_missing_file_exit_code(clean_env, tmp_path):
    assert cli.main([str(tmp_path / "missing.spoon")]) == 1


def test_internal_error_exit_code(clean_env, tmp_path, monkeypatch):
    source = write(tmp_path / "main.spoon", "x = 1\n")

    def fail(path):
        raise UnhandledNodeType("class")

    monkeypatch.setattr(cli, "compile_spoon_file", fail)
    assert cli.main([str(source)]) == 2


def test_worst_status_wins(clean_env, tmp_path):
    good = write(tmp_path / "good.spoon", "x = 1\n")
    bad = write(tmp_path / "bad.spoon", "x = )\n")

    assert cli.main([str(bad), str(good)]) == 1
    assert (tmp_path / "Good.hx").exists()


def test_undecodable_file_does_not_stop_others(clean_env, tmp_path):
    bad = tmp_path / "bad.spoon"
    bad.write_bytes(b"\xff")
    good = write(tmp_path / "good.spoon", "x = 1\n")
    out_dir = tmp_path / "out"

    assert cli.main([str(bad), str(good), "--out_dir", str(out_dir)]) == 1
    assert (out_dir / "Good.hx").exists()
    assert not (out_dir / "Bad.hx").exists()


def test_extension_from_environment(clean_env, tmp_path):
    clean_env.setenv("SPOON_OUTPUT_EXTENSION", "txt")
    source = write(tmp_path / "main.spoon", "x = 1\n")

    assert cli.main([str(source)]) == 0
    assert (tmp_path / "Main.txt").exists()


def test_config_defaults(clean_env):
    config = load_config()
    assert config.output_dir == "."
    assert config.extension == ".hx"
    assert config.log_level == "INFO"


def test_config_from_env_file(clean_env, tmp_path):
    env_file = write(tmp_path / "spoon.env", "SPOON_OUTPUT_DIR=build\nSPOON_LOG_LEVEL=debug\n")

    config = load_config(env_file)
    assert config.output_dir == "build"
    assert config.log_level == "DEBUG"


def test_environment_overrides_env_file(clean_env, tmp_path):
    clean_env.setenv("SPOON_OUTPUT_DIR", "out")
    env_file = write(tmp_path / "spoon.env", "SPOON_OUTPUT_DIR=build\n")

    assert load_config(env_file).output_dir == "out"
