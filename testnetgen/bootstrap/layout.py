"""testnetgen.bootstrap.layout

Where every file of node i lives. A fresh value per node, never shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from testnetgen.core.config import Config
from testnetgen.core.exceptions import DirectoryCreationError
from testnetgen.core.fsutil import ensure_dir


@dataclass(frozen=True, slots=True)
class NodeLayout:
    index: int
    moniker: str
    root: Path  # {out}/{prefix}{i}
    node_home: Path  # {root}/{daemon home}
    client_home: Path  # {root}/{cli home}
    gentxs_dir: Path  # {out}/gentxs, shared

    @classmethod
    def for_node(cls, cfg: Config, index: int) -> NodeLayout:
        moniker = f"{cfg.node_dir_prefix}{index}"
        root = cfg.output_dir / moniker
        return cls(
            index=index,
            moniker=moniker,
            root=root,
            node_home=root / cfg.node_daemon_home,
            client_home=root / cfg.node_cli_home,
            gentxs_dir=cfg.gentxs_dir,
        )

    @property
    def config_dir(self) -> Path:
        return self.node_home / "config"

    @property
    def data_dir(self) -> Path:
        return self.node_home / "data"

    @property
    def genesis_file(self) -> Path:
        return self.config_dir / "genesis.json"

    @property
    def app_toml(self) -> Path:
        return self.config_dir / "app.toml"

    @property
    def config_toml(self) -> Path:
        return self.config_dir / "config.toml"

    @property
    def seed_file(self) -> Path:
        return self.client_home / "key_seed.json"


def ensure_node_dirs(layout: NodeLayout) -> None:
    for d in (layout.config_dir, layout.data_dir, layout.client_home):
        try:
            ensure_dir(d)
        except OSError as e:
            raise DirectoryCreationError(f"{layout.moniker}: cannot create {d}: {e}") from e


def check_output_dir(cfg: Config) -> None:
    """Refuse to generate on top of an earlier run's nodes or staged gentxs."""

    out = cfg.output_dir
    if out.exists() and not out.is_dir():
        raise DirectoryCreationError(f"{out}: output path exists and is not a directory")
    if cfg.gentxs_dir.exists() and any(cfg.gentxs_dir.iterdir()):
        raise DirectoryCreationError(f"{cfg.gentxs_dir}: staging directory is not empty")
    for i in range(cfg.num_validators):
        root = NodeLayout.for_node(cfg, i).root
        if root.exists():
            raise DirectoryCreationError(f"{root}: node directory already exists")
