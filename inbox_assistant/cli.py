#!/usr/bin/env python3
"""
Inbox Assistant CLI - talk to the agents and inspect local state from a terminal
"""

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from inbox_assistant.config import load_config
from inbox_assistant.session import InboxSession


console = Console()


def parse_assignments(assignments: List[str]) -> Dict[str, Any]:
    """Turn ['age_threshold=60', 'promotional=false'] into typed changes"""
    changes = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {assignment!r}")
        try:
            changes[key.strip()] = json.loads(raw)
        except ValueError:
            changes[key.strip()] = raw
    return changes


# === Commands ===

async def chat(session: InboxSession, message: str) -> int:
    await session.chat.submit(message)

    reply = session.chat.messages[-1] if session.chat.messages else None
    if reply and reply.role == "assistant":
        style = "red" if session.chat.error else "green"
        console.print(f"[{style}]{reply.content}[/{style}]")

    if session.selection.previews:
        table = Table(title=f"{len(session.selection.previews)} matching emails")
        table.add_column("ID", style="dim")
        table.add_column("Sender")
        table.add_column("Subject")
        table.add_column("Date")
        table.add_column("Category", style="magenta")
        for preview in session.selection.previews:
            table.add_row(preview.id, preview.sender, preview.subject, preview.date, preview.category or "")
        console.print(table)

    return 1 if session.chat.error else 0


async def run_cleanup(session: InboxSession, dry_run: bool) -> int:
    mode = "DRY RUN (no emails will be deleted)" if dry_run else "LIVE MODE"
    console.print(f"[bold blue]Running cleanup[/bold blue] [yellow]{mode}[/yellow]")

    outcome = await (session.periodic.test_run() if dry_run else session.periodic.run_now())
    if outcome.status != "success":
        console.print(f"[red]{outcome.error}[/red]")
        return 1

    summary = outcome.result.cleanup_summary
    console.print(f"  - Emails processed: {summary.total_emails_processed:,}")
    if dry_run:
        console.print(f"  - Would delete: {summary.total_emails_processed:,}")
    else:
        console.print(f"  - Emails deleted: {summary.total_emails_deleted:,}")
    console.print(f"  - Rules executed: {summary.rules_executed}")
    for error in outcome.result.errors:
        console.print(f"  [yellow]! {error}[/yellow]")
    if outcome.result.next_scheduled_run:
        console.print(f"  [dim]Next scheduled run: {outcome.result.next_scheduled_run}[/dim]")
    return 0


def show_activity(session: InboxSession) -> int:
    if not session.activity.entries:
        console.print("[dim]No activity yet[/dim]")
        return 0

    table = Table(title="Recent Activity")
    table.add_column("When", style="dim")
    table.add_column("Action")
    table.add_column("Result")
    for entry in session.activity.entries:
        result = f"{entry.emails_deleted} emails deleted" if entry.status == "success" else "[red]Failed[/red]"
        table.add_row(entry.timestamp.strftime("%b %d, %Y %H:%M"), entry.action, result)
    console.print(table)
    return 0


def show_stats(session: InboxSession) -> int:
    stats = session.activity.stats()
    last = stats.last_cleanup.strftime("%b %d, %Y %H:%M") if stats.last_cleanup else "Never"
    console.print(f"[bold]This week:[/bold] {stats.week_count} emails cleaned")
    console.print(f"[bold]This month:[/bold] {stats.month_count} emails cleaned")
    console.print(f"[bold]Last cleanup:[/bold] {last}")
    return 0


def edit_settings(session: InboxSession, assignments: List[str], save: bool) -> int:
    if assignments:
        try:
            session.settings.update_draft(**parse_assignments(assignments))
        except ValueError as error:
            console.print(f"[red]Invalid settings: {error}[/red]")
            return 1

    table = Table(title="Cleanup Settings")
    table.add_column("Setting")
    table.add_column("Value", style="cyan")
    for key, value in session.settings.draft.model_dump(by_alias=True).items():
        table.add_row(key, str(value))
    console.print(table)

    if save:
        if not session.settings.save():
            console.print("[red]Failed to save settings[/red]")
            return 1
        console.print("[green]Settings saved[/green]")
    elif session.settings.has_unsaved_changes:
        console.print("[yellow]Changes not saved (use --save)[/yellow]")
    return 0


async def dispatch(args: argparse.Namespace, session: InboxSession) -> int:
    try:
        if args.command == "chat":
            return await chat(session, args.message)
        elif args.command == "run":
            return await run_cleanup(session, dry_run=False)
        elif args.command == "test-run":
            return await run_cleanup(session, dry_run=True)
        elif args.command == "activity":
            return show_activity(session)
        elif args.command == "stats":
            return show_stats(session)
        elif args.command == "settings":
            return edit_settings(session, args.set or [], args.save)
        return 1
    finally:
        await session.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Inbox assistant - chat cleanup and scheduled cleanup policy')
    subparsers = parser.add_subparsers(dest='command', required=True)

    chat_parser = subparsers.add_parser('chat', help='Send one message to the chat agent')
    chat_parser.add_argument('message', type=str)

    subparsers.add_parser('run', help='Run the cleanup policy now')
    subparsers.add_parser('test-run', help='Dry run of the cleanup policy')
    subparsers.add_parser('activity', help='Show the activity log')
    subparsers.add_parser('stats', help='Show weekly and monthly totals')

    settings_parser = subparsers.add_parser('settings', help='Show or edit the cleanup policy')
    settings_parser.add_argument('--set', action='append', metavar='KEY=VALUE',
                                 help='Change a setting, e.g. age_threshold=60 (repeatable)')
    settings_parser.add_argument('--save', action='store_true', help='Persist the edited settings')

    args = parser.parse_args(argv)

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    session = InboxSession(config)
    session.load()
    return asyncio.run(dispatch(args, session))


if __name__ == "__main__":
    raise SystemExit(main())
