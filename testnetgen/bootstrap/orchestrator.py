"""testnetgen.bootstrap.orchestrator

The bootstrap coordinator. Two phases, strictly in order, one node at a time.

Phase 1 (per node):
1) Directories
2) Peer address
3) Node + validator keys
4) Account + recovery phrase
5) Signed join-transaction into `gentxs/`
6) app.toml

Phase 2 (once):
7) Draft genesis with every account, identical on every node
8) Canonical genesis derived once from the drafts + all gentxs
9) Canonical bytes and peer list copied to each node

Any failure in either phase removes the whole output directory.
"""

from __future__ import annotations

import json
import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from testnetgen.bootstrap.layout import NodeLayout, check_output_dir, ensure_node_dirs
from testnetgen.bootstrap.rollback import rollback
from testnetgen.core.config import Config
from testnetgen.core.exceptions import BootstrapCancelled, GentxValidationError, SerializationError
from testnetgen.core.fsutil import SECRET_PERM, write_atomic
from testnetgen.core.models import Account, Coin
from testnetgen.core.time import format_genesis_time, utc_now
from testnetgen.core.types import NodeAccount, NodeIdentity
from testnetgen.genesis.appconfig import persistent_peers, write_app_toml, write_config_toml
from testnetgen.genesis.assembler import assemble_app_state, new_genesis_account, write_draft_genesis
from testnetgen.genesis.collector import derive_canonical_genesis, publish_genesis
from testnetgen.genesis.gentx import build_create_validator, read_gentxs, sign_gentx, write_gentx
from testnetgen.net.address import external_ip, octet_headroom, resolve_ip
from testnetgen.security.identity import init_validator_files
from testnetgen.security.keystore import Keyring

logger = logging.getLogger(__name__)

KeyringFactory = Callable[[NodeLayout], Keyring]


def random_chain_id() -> str:
    return str(secrets.randbits(63))


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    chain_id: str
    genesis_time: str
    output_dir: Path
    nodes: list[NodeIdentity] = field(default_factory=list)
    accounts: list[NodeAccount] = field(default_factory=list)
    gentx_files: list[Path] = field(default_factory=list)


@dataclass(slots=True)
class _PhaseOne:
    nodes: list[NodeIdentity] = field(default_factory=list)
    accounts: list[NodeAccount] = field(default_factory=list)
    genesis_accounts: list[Account] = field(default_factory=list)
    gentx_files: list[Path] = field(default_factory=list)


class NetworkBootstrap:
    """Generate an N-node testnet under `config.output_dir`.

    Not re-entrant: one run per output directory.
    """

    def __init__(
        self,
        config: Config,
        *,
        keyring_factory: KeyringFactory | None = None,
        ip_resolver: Callable[[], str] | None = None,
        cancel: threading.Event | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self._keyring_factory = keyring_factory or self._default_keyring
        self._ip_resolver = ip_resolver or external_ip
        self._cancel = cancel
        self._clock = clock

    def _default_keyring(self, layout: NodeLayout) -> Keyring:
        return Keyring(self.config.keyring_backend, layout.client_home, password=self.config.keyring_password)

    def _check_cancelled(self, where: str) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise BootstrapCancelled(f"cancelled {where}")

    def run(self) -> BootstrapResult:
        cfg = self.config
        chain_id = cfg.chain_id or random_chain_id()

        # Before anything is created: a refusal here must not trigger rollback.
        check_output_dir(cfg)

        if cfg.starting_ip_address and cfg.num_validators > octet_headroom(cfg.starting_ip_address):
            logger.warning(
                "ip_octet_wraparound",
                extra={"starting_ip": cfg.starting_ip_address, "nodes": cfg.num_validators},
            )

        logger.info("bootstrap_started", extra={"chain_id": chain_id, "nodes": cfg.num_validators})
        try:
            p1 = self._phase_one(chain_id)
            genesis_time = self._phase_two(chain_id, p1)
        except BaseException as e:
            logger.error("bootstrap_failed", extra={"error": f"{type(e).__name__}: {e}"})
            rollback(cfg.output_dir)
            raise

        logger.info("bootstrap_complete", extra={"chain_id": chain_id, "nodes": len(p1.nodes)})
        return BootstrapResult(
            chain_id=chain_id,
            genesis_time=genesis_time,
            output_dir=cfg.output_dir,
            nodes=p1.nodes,
            accounts=p1.accounts,
            gentx_files=p1.gentx_files,
        )

    # --- phase 1 ---

    def _phase_one(self, chain_id: str) -> _PhaseOne:
        out = _PhaseOne()
        for i in range(self.config.num_validators):
            self._check_cancelled(f"before node {i}")
            self._init_node(NodeLayout.for_node(self.config, i), chain_id, out)
        return out

    def _init_node(self, layout: NodeLayout, chain_id: str, out: _PhaseOne) -> None:
        cfg = self.config
        chain = cfg.chain

        ensure_node_dirs(layout)
        ip = resolve_ip(layout.index, cfg.starting_ip_address, self._ip_resolver)

        node_id, val_pubkey = init_validator_files(layout.config_dir, layout.data_dir)
        identity = NodeIdentity(
            index=layout.index,
            directory=layout.root,
            moniker=layout.moniker,
            node_id=node_id,
            validator_public_key=val_pubkey,
            address=ip,
        )

        keyring = self._keyring_factory(layout)
        logger.debug("keyring_opened", extra={"moniker": layout.moniker, "keyring": keyring.describe()})
        address, secret = keyring.create_account(layout.moniker)
        try:
            write_atomic(layout.seed_file, json.dumps({"secret": secret}).encode("utf-8"), mode=SECRET_PERM)
        except OSError as e:
            raise SerializationError(f"{layout.seed_file}: failed to save recovery phrase: {e}") from e

        self_stake = Coin.of(chain.native_denom, chain.tokens(chain.self_stake_power))
        tx = build_create_validator(identity, address, self_stake)
        signed = sign_gentx(tx, keyring, layout.moniker, chain_id)
        gentx_file = write_gentx(signed, layout.gentxs_dir, layout.moniker)

        write_app_toml(layout.app_toml, minimum_gas_prices=cfg.minimum_gas_prices)

        out.nodes.append(identity)
        out.accounts.append(NodeAccount(moniker=layout.moniker, address=address, seed_path=layout.seed_file))
        out.genesis_accounts.append(new_genesis_account(address, chain))
        out.gentx_files.append(gentx_file)

        logger.info(
            "node_initialized",
            extra={"moniker": layout.moniker, "node_id": node_id, "ip": ip, "account": address},
        )

    # --- phase 2 ---

    def _phase_two(self, chain_id: str, p1: _PhaseOne) -> str:
        cfg = self.config
        layouts = [NodeLayout.for_node(cfg, n.index) for n in p1.nodes]
        genesis_files = [layout.genesis_file for layout in layouts]

        # One timestamp for the whole network.
        genesis_time = format_genesis_time(self._clock())

        app_state = assemble_app_state(p1.genesis_accounts, cfg.chain.native_denom)
        write_draft_genesis(chain_id, app_state, genesis_files, genesis_time=genesis_time)

        gentxs = read_gentxs(cfg.gentxs_dir)
        if len(gentxs) != len(p1.nodes):
            raise GentxValidationError(
                f"{cfg.gentxs_dir}: expected {len(p1.nodes)} staged gentxs, found {len(gentxs)}"
            )

        canonical = derive_canonical_genesis(chain_id, genesis_files, gentxs, genesis_time=genesis_time)

        for node, layout in zip(p1.nodes, layouts, strict=True):
            self._check_cancelled(f"before collecting {layout.moniker}")
            publish_genesis(canonical, layout.genesis_file)
            write_config_toml(
                layout.config_toml,
                moniker=layout.moniker,
                peers=persistent_peers(canonical.memos, node.node_id),
            )
            logger.info("genesis_collected", extra={"moniker": layout.moniker, "path": str(layout.genesis_file)})

        return genesis_time
