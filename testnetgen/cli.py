"""testnetgen.cli

Command line interface entry point for testnetgen.

Design constraints:
- argparse-based.
- Lazy imports: do not import key or genesis machinery at parse time.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

EPILOG = "One chain id, one genesis, every node."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testnetgen",
        description="Generate configuration, keys, and a shared genesis for a local multi-validator testnet.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_testnet = sub.add_parser(
        "testnet",
        help="Initialize files for a testnet",
        description=(
            "Create N node directories and populate each with keys, app config, and a shared genesis. "
            "Strict address routability is turned off in the generated config."
        ),
    )
    p_testnet.add_argument(
        "--v",
        "--validators",
        dest="num_validators",
        type=int,
        default=None,
        help="Number of validators to initialize the testnet with (default: 4).",
    )
    p_testnet.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Directory to store initialization data for the testnet (default: ./build).",
    )
    p_testnet.add_argument(
        "--node-dir-prefix",
        default=None,
        help="Prefix the directory name for each node with (node results in node0, node1, ...).",
    )
    p_testnet.add_argument("--node-daemon-home", default=None, help="Home directory of the node's daemon configuration.")
    p_testnet.add_argument("--node-cli-home", default=None, help="Home directory of the node's cli configuration.")
    p_testnet.add_argument(
        "--starting-ip-address",
        default=None,
        help=(
            "Starting IP address (192.168.0.1 results in persistent peers list ID0@192.168.0.1:26656, "
            "ID1@192.168.0.2:26656, ...). Empty string auto-detects the external address."
        ),
    )
    p_testnet.add_argument("--chain-id", default=None, help="Genesis chain id; random if left blank.")
    p_testnet.add_argument(
        "--minimum-gas-prices",
        default=None,
        help="Minimum gas prices to accept for transactions (e.g. 0.01aphoton,0.001stake).",
    )
    p_testnet.add_argument(
        "--keyring-backend",
        choices=["os", "file", "test"],
        default=None,
        help="Select keyring's backend (default: file).",
    )
    p_testnet.add_argument("--config", type=Path, default=None, help="YAML config file (see config/default.yaml).")
    p_testnet.add_argument("--log-level", default=None, help="Log level (default: INFO).")
    p_testnet.add_argument("--log-json", action="store_true", help="Emit JSON log lines.")

    return parser


def _print_version() -> None:
    from testnetgen import __version__

    print(f"testnetgen v{__version__}")


_CONFIG_FLAGS = (
    "num_validators",
    "output_dir",
    "node_dir_prefix",
    "node_daemon_home",
    "node_cli_home",
    "starting_ip_address",
    "chain_id",
    "minimum_gas_prices",
    "keyring_backend",
)


def _load_config(args: argparse.Namespace) -> Any:
    from testnetgen.core.config import Config

    overrides: dict[str, Any] = {k: getattr(args, k) for k in _CONFIG_FLAGS if getattr(args, k) is not None}

    logging_overrides: dict[str, Any] = {}
    if args.log_level:
        logging_overrides["level"] = args.log_level
    if args.log_json:
        logging_overrides["json_output"] = True
    if logging_overrides:
        overrides["logging"] = logging_overrides

    if args.config is not None:
        return Config.from_yaml(args.config, **overrides)
    return Config(**overrides)


def _cmd_testnet(args: argparse.Namespace) -> int:
    # Lazy imports
    from pydantic import ValidationError

    from testnetgen.bootstrap.orchestrator import NetworkBootstrap
    from testnetgen.core.exceptions import ConfigError, TestnetgenError
    from testnetgen.core.logging import configure_logging

    try:
        cfg = _load_config(args)
    except (ConfigError, ValidationError) as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(cfg.logging)

    try:
        result = NetworkBootstrap(cfg).run()
    except TestnetgenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("interrupted; output removed", file=sys.stderr)
        return 130

    print(f"chain-id: {result.chain_id}")
    print(f"genesis-time: {result.genesis_time}")
    for node, acct in zip(result.nodes, result.accounts, strict=True):
        print(f"- {acct.moniker}: {node.node_id}@{node.address} account {acct.address}")
        print(f"  recovery phrase for account '{acct.moniker}' saved to {acct.seed_path}; store it and delete the file")

    print(f"Successfully initialized {len(result.nodes)} node directories", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    dispatch: dict[str, Callable[[argparse.Namespace], int]] = {
        "testnet": _cmd_testnet,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(args))


if __name__ == "__main__":
    raise SystemExit(main())
