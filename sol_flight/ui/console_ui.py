from decimal import Decimal
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import (
    Batch, DistributionResult, InvalidAddress, TransferOutcome, lamports_to_sol
)


class ConsoleUI:
    """Rich console output for a distribution run."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display_welcome(self, sender: str, network: str, rpc_url: str):
        title = Text()
        title.append("SOL ", style="bold magenta")
        title.append("FLIGHT ", style="bold cyan")
        title.append("DISTRIBUTION", style="bold yellow")

        body = (
            f"{title.plain}\n\n"
            f"[bright_white]Sender:[/] [cyan]{sender}[/]\n"
            f"[bright_white]Network:[/] [cyan]{network}[/] ({rpc_url})"
        )
        self.console.print(Panel(body, border_style="bright_blue", padding=(1, 2)))

    def display_parameters(self, recipient_count: int, amount_per_recipient: Decimal,
                           batch_size: int, concurrent_batches: int, batch_count: int):
        table = Table(
            title="Distribution Parameters",
            show_header=True,
            header_style="bold bright_magenta",
            border_style="bright_blue"
        )
        table.add_column("Metric", style="cyan", justify="right")
        table.add_column("Value", style="green", justify="left")

        metrics = [
            ("Recipients", f"{recipient_count:,}"),
            ("Amount per recipient", f"{amount_per_recipient} SOL"),
            ("Batch size", f"{batch_size} recipients per transaction"),
            ("Concurrent batches", str(concurrent_batches)),
            ("Batches", f"{batch_count:,}"),
        ]
        for metric, value in metrics:
            table.add_row(metric, value)

        self.console.print(table)

    def display_balance(self, balance_lamports: int, required_lamports: int):
        self.console.print(
            f"Sender balance: [bold bright_green]{lamports_to_sol(balance_lamports):.4f} SOL[/]\n"
            f"Total required: [bold]{lamports_to_sol(required_lamports):.4f} SOL[/] (+ fees)"
        )

    def display_invalid_addresses(self, invalid: List[InvalidAddress]):
        table = Table(show_header=True, header_style="bold red", border_style="red")
        table.add_column("Row", justify="right")
        table.add_column("Address")
        for entry in invalid:
            table.add_row(str(entry.row), escape(entry.address) if entry.address else "[dim](empty)[/]")
        self.console.print(Panel(table, title="[bold red]Invalid addresses found[/]", border_style="red"))

    def display_batch_result(self, batch: Batch, total_batches: int,
                             outcome: TransferOutcome, explorer_url: Optional[str] = None):
        header = f"Batch {batch.index + 1}/{total_batches} ({len(batch)} recipients)"
        if outcome.success:
            self.console.print(
                f"[green]✓[/] {header}\n"
                f"   Signature: [cyan]{outcome.signature}[/]\n"
                f"   Explorer: [blue]{explorer_url}[/]"
            )
        else:
            self.console.print(
                f"[red]✗[/] {header} failed after {outcome.retry_count} retries: "
                f"{escape(outcome.error_message)}"
            )

    def display_progress(self, completed: int, total: int):
        percent = round(completed / total * 100) if total else 100
        self.console.print(f"[yellow]Progress: {percent}% ({completed}/{total} batches completed)[/]")

    def display_summary(self, result: DistributionResult):
        table = Table(show_header=False, border_style="bright_blue")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="bright_white")

        table.add_row("Successful", f"[green]{result.successful}/{result.recipient_count}[/]")
        table.add_row("Failed", f"[red]{result.failed}/{result.recipient_count}[/]")
        table.add_row("Duration", f"{result.duration_seconds:.2f} seconds")
        table.add_row("Total transactions", str(result.total_transactions))
        table.add_row("Avg recipients per transaction", f"{result.average_recipients_per_transaction:.1f}")
        table.add_row("Initial balance", f"{lamports_to_sol(result.initial_balance_lamports):.4f} SOL")
        if result.final_balance_lamports is not None:
            table.add_row("Final balance", f"{lamports_to_sol(result.final_balance_lamports):.4f} SOL")
            table.add_row("Total spent", f"{lamports_to_sol(result.spent_lamports):.4f} SOL")

        self.console.print(Panel(table, title="[bold yellow]Distribution Summary[/]", border_style="bright_blue"))

        if result.transactions:
            tx_table = Table(
                title=f"Successful Transactions ({len(result.transactions)} batches)",
                header_style="bold green",
                border_style="green"
            )
            tx_table.add_column("Batch", justify="right")
            tx_table.add_column("Recipients", justify="right")
            tx_table.add_column("Explorer")
            for tx in sorted(result.transactions, key=lambda t: t.batch_index):
                tx_table.add_row(str(tx.batch_index + 1), str(len(tx.addresses)), tx.explorer_url)
            self.console.print(tx_table)

        if result.failures:
            self.console.print(f"\n[bold red]Failed Transfers ({len(result.failures)}):[/]")
            for failure in result.failures:
                self.console.print(f"  - {failure.address}: {escape(failure.error)}")

    def display_wallet_created(self, public_key: str, env_path: str, wallet_path: str, network: str):
        panel = Panel(
            f"""[bold green]Wallet generated successfully![/]
[bright_white]Public Key (Address): [cyan]{public_key}[/]
[bright_white]Private key saved to: [yellow]{env_path}[/] (backup: [yellow]{wallet_path}[/])

[bold]Next steps:[/]
1. Fund the wallet: [blue]solana airdrop 2 {public_key} --url {network}[/]
2. Check the balance: [blue]solana balance {public_key} --url {network}[/]
3. Add recipient addresses to recipients.csv
4. Run the distribution: [blue]sol-flight 0.01[/]""",
            title="[bold green]New Wallet[/]",
            border_style="green"
        )
        self.console.print(panel)

    def display_error(self, message: str):
        panel = Panel(
            f"[bold red]Error: {escape(message)}[/]",
            title="[bold red]Error[/]",
            border_style="red"
        )
        self.console.print("\n")
        self.console.print(panel)
        self.console.print("\n")
