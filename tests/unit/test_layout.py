from __future__ import annotations

import pytest

from testnetgen.bootstrap.layout import NodeLayout, check_output_dir, ensure_node_dirs
from testnetgen.core.config import Config
from testnetgen.core.exceptions import DirectoryCreationError


def test_layout_paths(test_config: Config) -> None:
    out = test_config.output_dir
    layout = NodeLayout.for_node(test_config, 3)

    assert layout.moniker == "node3"
    assert layout.root == out / "node3"
    assert layout.genesis_file == out / "node3" / "ethermintd" / "config" / "genesis.json"
    assert layout.data_dir == out / "node3" / "ethermintd" / "data"
    assert layout.seed_file == out / "node3" / "ethermintcli" / "key_seed.json"
    assert layout.gentxs_dir == out / "gentxs"


def test_layout_uses_configured_names(test_config: Config) -> None:
    cfg = test_config.model_copy(update={"node_dir_prefix": "val", "node_daemon_home": "d", "node_cli_home": "c"})
    layout = NodeLayout.for_node(cfg, 0)
    assert layout.root.name == "val0"
    assert layout.config_dir == cfg.output_dir / "val0" / "d" / "config"
    assert layout.client_home == cfg.output_dir / "val0" / "c"


def test_ensure_node_dirs_creates_tree(test_config: Config) -> None:
    layout = NodeLayout.for_node(test_config, 0)
    ensure_node_dirs(layout)
    assert layout.config_dir.is_dir()
    assert layout.data_dir.is_dir()
    assert layout.client_home.is_dir()


def test_ensure_node_dirs_failure(test_config: Config) -> None:
    test_config.output_dir.parent.mkdir(parents=True, exist_ok=True)
    test_config.output_dir.write_text("not a dir", encoding="utf-8")
    with pytest.raises(DirectoryCreationError):
        ensure_node_dirs(NodeLayout.for_node(test_config, 0))


def test_check_output_dir_accepts_fresh_and_empty(test_config: Config) -> None:
    check_output_dir(test_config)
    test_config.output_dir.mkdir(parents=True)
    check_output_dir(test_config)


def test_check_output_dir_refuses_existing_node(test_config: Config) -> None:
    NodeLayout.for_node(test_config, 1).root.mkdir(parents=True)
    with pytest.raises(DirectoryCreationError):
        check_output_dir(test_config)


def test_check_output_dir_refuses_staged_gentxs(test_config: Config) -> None:
    test_config.gentxs_dir.mkdir(parents=True)
    (test_config.gentxs_dir / "stale.json").write_text("{}", encoding="utf-8")
    with pytest.raises(DirectoryCreationError):
        check_output_dir(test_config)


def test_check_output_dir_refuses_file(test_config: Config) -> None:
    test_config.output_dir.write_text("x", encoding="utf-8")
    with pytest.raises(DirectoryCreationError):
        check_output_dir(test_config)
