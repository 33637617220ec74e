# starledger/cli/main.py
"""
CLI for requesting challenges, signing them, and inspecting / verifying star ledger chains.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from starledger.config import Settings
from starledger.core.types import Block
from starledger.core.errors import LedgerError
from starledger.crypto.keys import WalletKeyPair
from starledger.crypto.signatures import Ed25519SignatureVerifier
from starledger.chain.challenge import ChallengeIssuer
from starledger.chain.ledger import Ledger
from starledger.verify.verifier import ChainVerifier

app = typer.Typer(
    name="starledger",
    help="Register stars on a hash-linked ledger after proving wallet ownership",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def load_settings() -> Settings:
    try:
        return Settings.load()
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log ledger activity"),
):
    """Star ledger command line."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@app.command()
def keygen():
    """Generate a new Ed25519 wallet (identity + private key)."""
    wallet = WalletKeyPair.generate()
    console.print(f"[bold]identity:[/]    {wallet.identity}")
    console.print(f"[bold]private key:[/] {wallet.private_key_b64url()}")
    console.print("[yellow]Keep the private key secret; it signs your challenges.[/]")


@app.command()
def challenge(
    identity: str = typer.Argument(..., help="Wallet identity to bind the challenge to"),
):
    """Print a fresh ownership challenge for IDENTITY."""
    settings = load_settings()
    issuer = ChallengeIssuer(purpose=settings.purpose_tag)
    message = issuer.issue(identity)
    console.print(message, highlight=False, soft_wrap=True)
    console.print(
        f"[dim]Sign it and submit within {settings.challenge_expiry_seconds} seconds.[/]"
    )


@app.command()
def sign(
    message: str = typer.Argument(..., help="Challenge message to sign"),
    key: str = typer.Option(..., "--key", "-k", help="base64url private key from `keygen`"),
):
    """Sign a challenge message with a wallet private key."""
    try:
        wallet = WalletKeyPair.from_private_b64url(key)
    except ValueError as e:
        console.print(f"[red]Invalid private key: {e}[/]")
        raise typer.Exit(1)
    console.print(wallet.sign_message(message), highlight=False, soft_wrap=True)


def _blocks_table(ledger: Ledger) -> Table:
    table = Table(title="Star Ledger")
    table.add_column("Height")
    table.add_column("Timestamp")
    table.add_column("Hash")
    table.add_column("Identity")
    table.add_column("Star")

    for block in ledger.get_chain():
        if block.is_genesis:
            identity, star = "—", "genesis"
        else:
            record = block.decode_payload()
            identity = record.identity[:12] + "…"
            star = json.dumps(record.star, separators=(",", ":"))
        table.add_row(str(block.height), str(block.timestamp), block.hash[:16], identity, star)
    return table


@app.command()
def demo(
    stars: int = typer.Option(3, "--stars", "-n", min=0, help="Number of stars to register"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Export the chain as JSONL"),
):
    """Build an in-memory ledger, register stars from a fresh wallet, and validate it."""
    settings = load_settings()
    ledger = Ledger(settings=settings)
    wallet = WalletKeyPair.generate()

    try:
        for i in range(stars):
            message = ledger.request_challenge(wallet.identity)
            signature = wallet.sign_message(message)
            ledger.submit(
                wallet.identity,
                message,
                signature,
                {"ra": f"{i}h 29m 1.0s", "dec": f"-{i}° 14' 24.0\"", "story": f"demo star #{i}"},
            )
    except LedgerError as e:
        console.print(f"[red]Submission failed: {e}[/]")
        raise typer.Exit(1)

    console.print(_blocks_table(ledger))

    errors = ledger.validate()
    if errors:
        console.print(f"[red]✗ Chain invalid ({len(errors)} issues)[/]")
        for err in errors:
            console.print(f"  • {err}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Chain valid, height {ledger.current_height}[/]")

    if output:
        write_jsonl(ledger.get_chain(), output)
        console.print(f"[green]Exported {len(ledger)} blocks to {output}[/]")


def write_jsonl(blocks: List[Block], path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for block in blocks:
            json.dump(block.to_dict(), f, separators=(",", ":"))
            f.write("\n")


def read_jsonl(path: Path) -> List[Block]:
    blocks = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            blocks.append(Block.from_dict(json.loads(line)))
    return blocks


@app.command()
def verify(
    path: Path = typer.Argument(..., help="JSONL export (one block per line)"),
    signatures: bool = typer.Option(False, "--signatures", help="Also re-check every star signature"),
):
    """Verify an exported chain offline (heights, hash links, block hashes)."""
    if not path.exists():
        console.print(f"[red]File not found: {path}[/]")
        raise typer.Exit(1)

    try:
        blocks = read_jsonl(path)
    except (LedgerError, json.JSONDecodeError, UnicodeDecodeError) as e:
        console.print(f"[red]Failed to load chain: {e}[/]")
        raise typer.Exit(1)

    verifier = ChainVerifier(Ed25519SignatureVerifier() if signatures else None)
    result = verifier.verify(blocks)

    if result.is_valid:
        console.print(f"[green]✓ Chain in '{path.name}' is valid[/]")
        console.print(f"  {len(blocks)} blocks, {result.message}")
    else:
        console.print(f"[red]✗ Verification failed for '{path.name}'[/]")
        for failure in result.failures:
            console.print(f"  • {failure}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
