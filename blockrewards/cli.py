"""CLI entry point for blockrewards."""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from .config import Config

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if level.upper() != "DEBUG":
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def _load_network_config(config: Config):
    from .spec.network_config import load_config, load_config_from_upstream

    if config.network_config_path:
        network_config = load_config(config.network_config_path)
        logger.info(f"Loaded network config from {config.network_config_path}")
    else:
        logger.info(f"Fetching {config.preset} config from upstream")
        network_config = load_config_from_upstream(config.preset)
    return network_config


def _load_block_and_pre_state(block_path: str, pre_state_path: str, network_config):
    from .ssz import load_signed_block, load_state

    fork, signed_block = load_signed_block(block_path, network_config)
    _, state = load_state(pre_state_path, network_config)

    block_slot = int(signed_block.message.slot)
    if int(state.slot) != block_slot:
        raise click.ClickException(
            f"Pre-state slot {int(state.slot)} does not match block slot {block_slot}; "
            "the pre-state must be advanced to the block's slot"
        )
    logger.info(f"Loaded {fork.key} block at slot {block_slot}")
    return signed_block, state


@click.group()
@click.version_option(package_name="blockrewards")
@click.option(
    "--network-config",
    type=click.Path(exists=True),
    help="Path to network config YAML file (fetches from upstream if not provided)",
    envvar="BLOCKREWARDS_NETWORK_CONFIG",
)
@click.option(
    "--preset",
    default="mainnet",
    type=click.Choice(["mainnet", "minimal"], case_sensitive=False),
    help="Preset to use (mainnet or minimal)",
    envvar="BLOCKREWARDS_PRESET",
)
@click.option(
    "--data-dir",
    default="./data",
    type=click.Path(),
    help="Directory for storing blocks and pre-states",
    envvar="BLOCKREWARDS_DATA_DIR",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
    envvar="BLOCKREWARDS_LOG_LEVEL",
)
@click.pass_context
def cli(ctx: click.Context, network_config: Optional[str], preset: str, data_dir: str, log_level: str):
    """Blockrewards - proposer reward breakdown of beacon blocks."""
    setup_logging(log_level)

    from .spec.constants import set_preset
    set_preset(preset.lower())
    logger.debug(f"Preset set to: {preset}")

    ctx.obj = Config(
        network_config_path=network_config or "",
        preset=preset.lower(),
        data_dir=data_dir,
        log_level=log_level,
    )


@cli.command()
@click.option("--block", "block_path", type=click.Path(exists=True), required=True,
              help="Signed beacon block (.ssz or .ssz_snappy)")
@click.option("--pre-state", "pre_state_path", type=click.Path(exists=True), required=True,
              help="State at the block's slot before the block (.ssz or .ssz_snappy)")
@click.pass_obj
def compute(config: Config, block_path: str, pre_state_path: str):
    """Compute the proposer rewards of a block and print them as JSON."""
    network_config = _load_network_config(config)

    from .rewards import CachedBeaconState, UnsupportedForkOperation, compute_block_rewards

    signed_block, state = _load_block_and_pre_state(block_path, pre_state_path, network_config)
    pre_state = CachedBeaconState.from_state(state, network_config)

    try:
        rewards = asyncio.run(compute_block_rewards(signed_block.message, pre_state))
    except UnsupportedForkOperation as e:
        raise click.ClickException(str(e)) from e
    except AssertionError as e:
        raise click.ClickException(f"Invalid block: {e}") from e

    click.echo(json.dumps(rewards.to_json(), indent=2))


@cli.command(name="import")
@click.option("--block", "block_path", type=click.Path(exists=True), required=True,
              help="Signed beacon block (.ssz or .ssz_snappy)")
@click.option("--pre-state", "pre_state_path", type=click.Path(exists=True), required=True,
              help="State at the block's slot before the block (.ssz or .ssz_snappy)")
@click.pass_obj
def import_block(config: Config, block_path: str, pre_state_path: str):
    """Store a block and its pre-state in the data directory."""
    network_config = _load_network_config(config)

    from .crypto import hash_tree_root
    from .store import Store

    signed_block, state = _load_block_and_pre_state(block_path, pre_state_path, network_config)
    root = hash_tree_root(signed_block.message)

    store = Store(config.data_dir, network_config)
    try:
        store.save_block(root, signed_block)
        store.save_pre_state(root, state)
    finally:
        store.close()

    click.echo(f"0x{root.hex()}")


@cli.command()
@click.option(
    "--host",
    default="0.0.0.0",
    help="Host to bind the Beacon API",
    envvar="BLOCKREWARDS_HOST",
)
@click.option(
    "--beacon-api-port",
    default=5052,
    type=int,
    help="Port for Beacon API HTTP server",
    envvar="BLOCKREWARDS_BEACON_API_PORT",
)
@click.option(
    "--metrics-port",
    default=8008,
    type=int,
    help="Port for the Prometheus metrics server",
    envvar="BLOCKREWARDS_METRICS_PORT",
)
@click.option(
    "--finalized-slot",
    default=0,
    type=int,
    help="Blocks at or before this slot are reported as finalized",
    envvar="BLOCKREWARDS_FINALIZED_SLOT",
)
@click.pass_obj
def serve(config: Config, host: str, beacon_api_port: int, metrics_port: int, finalized_slot: int):
    """Serve block rewards over the Beacon API."""
    config.host = host
    config.beacon_api_port = beacon_api_port
    config.metrics_port = metrics_port
    config.finalized_slot = finalized_slot

    network_config = _load_network_config(config)

    from .service import run_service

    logger.info("Starting blockrewards")
    logger.info(f"  Preset: {config.preset}")
    logger.info(f"  Data dir: {config.data_dir}")
    logger.info(f"  Beacon API: {host}:{beacon_api_port}")
    logger.info(f"  Metrics: port {metrics_port}")

    try:
        asyncio.run(run_service(config, network_config))
    except KeyboardInterrupt:
        logger.info("Shutting down")
        sys.exit(0)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
