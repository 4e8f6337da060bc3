from __future__ import annotations

import logging
from pathlib import Path

import pytest

from testnetgen import __version__
from testnetgen.cli import build_parser, main
from testnetgen.security import identity


def test_cli_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        main(["--help"])
    assert e.value.code == 0
    assert "testnet" in capsys.readouterr().out


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_cli_no_command_returns_2(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 2


def test_testnet_flags_parse() -> None:
    args = build_parser().parse_args(
        [
            "testnet",
            "--v",
            "3",
            "-o",
            "out",
            "--node-dir-prefix",
            "val",
            "--starting-ip-address",
            "",
            "--chain-id",
            "abc",
            "--keyring-backend",
            "test",
        ]
    )
    assert args.num_validators == 3
    assert args.output_dir == Path("out")
    assert args.node_dir_prefix == "val"
    assert args.starting_ip_address == ""
    assert args.chain_id == "abc"
    assert args.keyring_backend == "test"
    assert args.node_daemon_home is None


def test_testnet_invalid_config_returns_2(temp_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["testnet", "--v", "0", "-o", str(temp_dir / "out")]) == 2
    assert "invalid configuration" in capsys.readouterr().err
    assert not (temp_dir / "out").exists()


def test_testnet_unknown_log_level_returns_2(temp_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = temp_dir / "out"
    rc = main(["testnet", "-o", str(out), "--keyring-backend", "test", "--log-level", "LOUD"])

    assert rc == 2
    assert "unknown log level" in capsys.readouterr().err
    assert not out.exists()


def test_testnet_missing_config_file_returns_2(temp_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["testnet", "--config", str(temp_dir / "missing.yaml")]) == 2


def test_testnet_end_to_end(
    temp_dir: Path,
    capsys: pytest.CaptureFixture[str],
    restore_logger: logging.Logger,
) -> None:
    out = temp_dir / "build"
    rc = main(
        [
            "testnet",
            "--v",
            "2",
            "-o",
            str(out),
            "--keyring-backend",
            "test",
            "--starting-ip-address",
            "10.0.0.1",
            "--chain-id",
            "testchain-1",
        ]
    )
    captured = capsys.readouterr()

    assert rc == 0
    assert "Successfully initialized 2 node directories" in captured.err
    assert "chain-id: testchain-1" in captured.out
    assert "@10.0.0.2" in captured.out
    assert (out / "node0" / "ethermintd" / "config" / "genesis.json").exists()
    assert (out / "gentxs" / "node1.json").exists()


def test_testnet_refuses_existing_output(
    temp_dir: Path,
    capsys: pytest.CaptureFixture[str],
    restore_logger: logging.Logger,
) -> None:
    out = temp_dir / "build"
    (out / "node0").mkdir(parents=True)
    (out / "keep.txt").write_text("mine", encoding="utf-8")

    rc = main(["testnet", "--v", "1", "-o", str(out), "--keyring-backend", "test"])

    assert rc == 1
    assert "error:" in capsys.readouterr().err
    assert (out / "keep.txt").read_text(encoding="utf-8") == "mine"


def test_testnet_uses_yaml_config(
    temp_dir: Path,
    capsys: pytest.CaptureFixture[str],
    restore_logger: logging.Logger,
) -> None:
    out = temp_dir / "yaml-build"
    cfg = temp_dir / "c.yaml"
    cfg.write_text(
        f"num_validators: 1\noutput_dir: {out}\nkeyring_backend: test\nnode_dir_prefix: val\n",
        encoding="utf-8",
    )

    assert main(["testnet", "--config", str(cfg), "--starting-ip-address", "10.1.1.1"]) == 0
    assert (out / "val0" / "ethermintcli" / "key_seed.json").exists()


def test_testnet_key_write_failure_returns_1(
    temp_dir: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
    restore_logger: logging.Logger,
) -> None:
    def _read_only(path: Path, data: bytes, *, mode: int = 0o644) -> None:
        raise PermissionError("read-only fs")

    monkeypatch.setattr(identity, "write_atomic", _read_only)
    out = temp_dir / "build"

    rc = main(["testnet", "--v", "1", "-o", str(out), "--keyring-backend", "test", "--starting-ip-address", "10.0.0.1"])

    assert rc == 1
    assert "failed to write key file" in capsys.readouterr().err
    assert not out.exists()
