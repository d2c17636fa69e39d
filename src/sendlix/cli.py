# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for the Sendlix SDK.

Sends emails and manages group members from the shell, using the same
clients an application would use.

Usage:
    sendlix send --from me@example.com --to you@example.com --subject Hi --text "Hello"
    sendlix send-eml message.eml --category newsletter
    sendlix group add newsletter a@example.com b@example.com --sub name=John
    sendlix group remove newsletter a@example.com
    sendlix group check newsletter a@example.com

The API key is read from ``--api-key`` or from the ``SENDLIX_API_KEY``
environment variable.

Example:
    $ export SENDLIX_API_KEY=my-secret.42
    $ sendlix --wire-version v2 send --from me@example.com \\
        --to you@example.com --subject "Report" --html-file report.html
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.table import Table

from sendlix.clients import EmailClient, GroupClient
from sendlix.clients.base import Client
from sendlix.config import API_KEY_ENV, ClientConfig, WireVersion, api_key_from_env, load_client_config
from sendlix.errors import SendlixError
from sendlix.options import AdditionalEmailOptions, MailOptions, SendEmailResponse

console = Console()
err_console = Console(stderr=True)

ClientT = TypeVar("ClientT", bound=Client)


@dataclass
class CliState:
    """Options shared by every command."""

    api_key: str | None
    config: ClientConfig
    wire_version: WireVersion


def print_error(message: str) -> None:
    """Print a formatted error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a formatted success message with checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_json(data: Any) -> None:
    """Print data as syntax-highlighted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def parse_substitutions(values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated ``key=value`` options into a dict.

    Raises:
        click.BadParameter: If an item has no ``=``.
    """
    result: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--sub")
        result[key] = value
    return result


def run_with_client(
    state: CliState,
    client_cls: type[ClientT],
    action: Callable[[ClientT], Awaitable[Any]],
) -> Any:
    """Create a client, run ``action`` with it and close it.

    SDK errors are printed and end the process with exit status 1.
    """
    if not state.api_key:
        print_error(f"No API key given. Use --api-key or set {API_KEY_ENV}.")
        sys.exit(1)

    async def runner() -> Any:
        client = client_cls(state.api_key, config=state.config, wire_version=state.wire_version)
        try:
            return await action(client)
        finally:
            await client.close()

    try:
        return asyncio.run(runner())
    except SendlixError as exc:
        print_error(str(exc))
        sys.exit(1)
    except OSError as exc:
        print_error(f"Cannot read file: {exc}")
        sys.exit(1)


def show_send_result(result: SendEmailResponse, as_json: bool) -> None:
    if as_json:
        print_json({"message_list": result.message_list, "emails_left": result.emails_left})
        return
    table = Table(title="Accepted messages")
    table.add_column("Message ID", style="cyan")
    for message_id in result.message_list:
        table.add_row(message_id)
    console.print(table)
    if result.emails_left is not None:
        console.print(f"Emails left: [bold]{result.emails_left}[/bold]")


@click.group()
@click.version_option(package_name="sendlix")
@click.option("--api-key", default=None, help=f"API key 'secret.keyId' (default: ${API_KEY_ENV}).")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to an INI file with a [sendlix] section.")
@click.option("--wire-version", type=click.Choice([v.value for v in WireVersion]), default=None,
              help="Request schema (overrides the configuration).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, api_key: str | None, config_path: str | None,
         wire_version: str | None, verbose: bool) -> None:
    """Send email and manage groups with the Sendlix API."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_client_config(config_path)
    ctx.obj = CliState(
        api_key=api_key or api_key_from_env(),
        config=config,
        wire_version=WireVersion(wire_version) if wire_version else config.wire_version,
    )


@main.command("send")
@click.option("--from", "sender", required=True, help="Sender address.")
@click.option("--to", "to", multiple=True, required=True, help="Recipient (repeatable).")
@click.option("--cc", multiple=True, help="CC recipient (repeatable).")
@click.option("--bcc", multiple=True, help="BCC recipient (repeatable).")
@click.option("--reply-to", help="Reply-To address.")
@click.option("--subject", "-s", required=True, help="Subject line.")
@click.option("--html", help="HTML body.")
@click.option("--html-file", type=click.Path(exists=True, dir_okay=False), help="Read the HTML body from a file.")
@click.option("--text", help="Plain text body.")
@click.option("--tracking", is_flag=True, help="Enable link tracking (HTML only).")
@click.option("--category", help="Category for reporting.")
@click.option("--sub", "subs", multiple=True, help="Substitution key=value (repeatable).")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def send_cmd(state: CliState, sender: str, to: tuple[str, ...], cc: tuple[str, ...],
             bcc: tuple[str, ...], reply_to: str | None, subject: str, html: str | None,
             html_file: str | None, text: str | None, tracking: bool, category: str | None,
             subs: tuple[str, ...], as_json: bool) -> None:
    """Send an email."""
    if html_file:
        html = Path(html_file).read_text(encoding="utf-8")
    options = MailOptions(
        sender=sender,
        to=list(to),
        cc=list(cc) or None,
        bcc=list(bcc) or None,
        reply_to=reply_to,
        subject=subject,
        html=html,
        text=text,
        tracking=tracking,
        substitutions=parse_substitutions(subs) or None,
    )
    additional = AdditionalEmailOptions(category=category) if category else None

    async def action(client: EmailClient) -> SendEmailResponse:
        return await client.send_email(options, additional)

    result = run_with_client(state, EmailClient, action)
    show_send_result(result, as_json)


@main.command("send-eml")
@click.argument("eml_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--category", help="Category for reporting.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def send_eml_cmd(state: CliState, eml_file: str, category: str | None, as_json: bool) -> None:
    """Send a raw EML file."""
    additional = AdditionalEmailOptions(category=category) if category else None

    async def action(client: EmailClient) -> SendEmailResponse:
        return await client.send_eml_email(eml_file, additional)

    result = run_with_client(state, EmailClient, action)
    show_send_result(result, as_json)


@main.group("group")
def group_cmd() -> None:
    """Manage group members."""


@group_cmd.command("add")
@click.argument("group_id")
@click.argument("emails", nargs=-1, required=True)
@click.option("--sub", "subs", multiple=True, help="Substitution key=value shared by all members.")
@click.option("--on-failure", type=click.Choice(["abort", "skip"]), default=None,
              help="How the server handles invalid entries (v2 only).")
@click.pass_obj
def group_add_cmd(state: CliState, group_id: str, emails: tuple[str, ...],
                  subs: tuple[str, ...], on_failure: str | None) -> None:
    """Insert one or more members into a group."""
    substitutions = parse_substitutions(subs) or None
    failure_handling = on_failure.upper() if on_failure else None

    async def action(client: GroupClient) -> bool:
        return await client.insert_email_into_group(group_id, list(emails), substitutions, failure_handling)

    run_with_client(state, GroupClient, action)
    print_success(f"Added {len(emails)} member(s) to '{group_id}'")


@group_cmd.command("remove")
@click.argument("group_id")
@click.argument("email")
@click.pass_obj
def group_remove_cmd(state: CliState, group_id: str, email: str) -> None:
    """Remove a member from a group."""

    async def action(client: GroupClient) -> bool:
        return await client.delete_email_from_group(group_id, email)

    run_with_client(state, GroupClient, action)
    print_success(f"Removed {email} from '{group_id}'")


@group_cmd.command("check")
@click.argument("group_id")
@click.argument("email")
@click.pass_obj
def group_check_cmd(state: CliState, group_id: str, email: str) -> None:
    """Check whether an address is a member of a group."""

    async def action(client: GroupClient) -> bool:
        return await client.contains_email_in_group(group_id, email)

    if run_with_client(state, GroupClient, action):
        console.print(f"{email} [green]is[/green] a member of '{group_id}'")
    else:
        console.print(f"{email} is [yellow]not[/yellow] a member of '{group_id}'")


if __name__ == "__main__":
    main()
