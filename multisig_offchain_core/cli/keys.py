"""CLI commands for generating owner keys."""

import logging
from pathlib import Path

import click

from .config.formatting import print_address_info, print_header, print_status
from .config.keys import KeyManager

logger = logging.getLogger(__name__)


def generate_owner_keys(output_dir: Path, count: int) -> list[bytes]:
    """Generate ``count`` key pairs under ``output_dir/owner_<i>``.

    Returns:
        The public keys, in owner order
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    public_keys = []

    for i in range(count):
        owner_dir = output_dir / f"owner_{i}"
        owner_dir.mkdir(exist_ok=True)

        signing_key, verify_key = KeyManager.generate()
        KeyManager.save_key(signing_key, owner_dir / "signing.skey", f"Owner {i}")
        KeyManager.save_key(verify_key, owner_dir / "verification.vkey", f"Owner {i}")
        public_keys.append(bytes(verify_key))

    logger.info("Generated %d owner keys in %s", count, output_dir)
    return public_keys


@click.group()
def keys() -> None:
    """Owner key management commands."""


@keys.command()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory to write owner key folders to",
)
@click.option(
    "--count",
    type=click.IntRange(1, 10),
    default=1,
    show_default=True,
    help="Number of key pairs to generate",
)
def generate(output_dir: Path, count: int) -> None:
    """Generate ed25519 owner keys."""
    try:
        public_keys = generate_owner_keys(output_dir, count)
    except OSError as e:
        logger.error("Key generation failed", exc_info=e)
        raise click.ClickException(str(e)) from e

    print_header("Generated Keys")
    for i, public_key in enumerate(public_keys):
        print_address_info(f"Owner {i}", public_key.hex())
    print_status("Keys", f"written to {output_dir}")
