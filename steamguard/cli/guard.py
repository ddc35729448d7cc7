# =============================================================================
# steamguard/cli/guard.py: Authenticator command-line tool
# =============================================================================
#
# Drives the protocol engine from a terminal.  Three command groups:
#
#   code                          Print the current five-character login code
#   confirmations list|allow|cancel
#                                 Read and act on the confirmation queue
#   session set|validate|info|clear
#                                 Manage the stored community session cookies
#
# Accounts are read from a JSON file holding the Account fields, e.g.
#   {"steam_id": "7656...", "shared_secret": "...", "identity_secret": "..."}
#
# Results go to stdout (plain text, or JSON with --json); log lines go to
# stderr.  Exit codes: 0 success, 1 error, 2 re-authentication required.
# =============================================================================

"""Command-line interface for the steamguard protocol engine.

Usage::

    python -m steamguard.cli code --secret <shared_secret>
    python -m steamguard.cli confirmations list --account account.json
    python -m steamguard.cli confirmations allow --account account.json 123:9876
    python -m steamguard.cli session set --account account.json \\
        --session-token <sessionid> --auth-token <steamLoginSecure>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from steamguard.config.settings import Settings
from steamguard.main import Authenticator, build_authenticator
from steamguard.models.account import Account
from steamguard.models.confirmation import BatchResult, Confirmation
from steamguard.models.guard import GuardCode
from steamguard.services.guard_code import TIME_STEP_SECONDS, generate_code
from steamguard.utils.errors import (
    BatchFailedError,
    LoginRequiredError,
    SteamGuardError,
)
from steamguard.utils.logging import configure_logging

_EXIT_OK = 0
_EXIT_ERROR = 1
_EXIT_LOGIN_REQUIRED = 2


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def _load_account(path: str) -> Account:
    """Read an :class:`Account` from a JSON file.

    Raises ``SteamGuardError`` with a readable message if the file is
    missing, is not JSON, or lacks a steam id.
    """
    account_path = Path(path)
    if not account_path.exists():
        raise SteamGuardError(f"Account file not found: {account_path}")
    try:
        data = json.loads(account_path.read_text(encoding="utf-8"))
        return Account.model_validate(data)
    except json.JSONDecodeError as exc:
        raise SteamGuardError(f"Account file is not valid JSON: {exc}") from exc
    except ValidationError as exc:
        raise SteamGuardError(
            f"Account file is missing required fields ({exc.error_count()} error(s))"
        ) from exc


def _parse_pair(text: str) -> Confirmation:
    """Turn ``id:key`` into a :class:`Confirmation`; missing parts stay empty."""
    conf_id, _, key = text.partition(":")
    return Confirmation(id=conf_id.strip(), key=key.strip())


def _account_id(args: argparse.Namespace) -> str:
    if args.account_id:
        return args.account_id
    if args.account:
        return _load_account(args.account).account_id
    raise SteamGuardError("Either --account or --account-id is required")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_confirmations(confirmations: list[Confirmation]) -> str:
    if not confirmations:
        return "No pending confirmations."
    lines = [f"{len(confirmations)} pending confirmation(s):"]
    for conf in confirmations:
        label = conf.type_name or (f"type {conf.type}" if conf.type is not None else "unknown")
        lines.append(f"  {conf.id}:{conf.key}  [{label}] {conf.headline}".rstrip())
        for line in conf.summary:
            lines.append(f"      {line}")
    return "\n".join(lines)


def _format_batch(result: BatchResult) -> str:
    lines = [
        f"{result.operation.value}: {result.success_count} succeeded, "
        f"{result.failure_count} failed"
    ]
    for item in result.items:
        status = "ok" if item.success else f"FAILED ({item.error})"
        lines.append(f"  {item.id}: {status}")
    return "\n".join(lines)


def _emit(payload: object, text: str, json_output: bool) -> None:
    if json_output:
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _shared_secret(args: argparse.Namespace) -> str | None:
    if args.secret is not None:
        return args.secret
    return _load_account(args.account).shared_secret


def _emit_code(guard: GuardCode, json_output: bool) -> int:
    _emit(
        guard.model_dump(),
        f"{guard.code}  (valid for {guard.valid_for_seconds}s)",
        json_output,
    )
    return _EXIT_OK


async def _handle_code(args: argparse.Namespace, authenticator: Authenticator) -> int:
    """Print the code for the synchronized current time."""
    guard = await authenticator.guard_code(_shared_secret(args))
    return _emit_code(guard, args.json_output)


def _handle_offline_code(args: argparse.Namespace) -> int:
    """Print the code at ``--timestamp`` without touching the network."""
    guard = GuardCode(
        code=generate_code(_shared_secret(args), args.timestamp),
        valid_for_seconds=TIME_STEP_SECONDS - (args.timestamp % TIME_STEP_SECONDS),
    )
    return _emit_code(guard, args.json_output)


async def _handle_confirmations(args: argparse.Namespace, authenticator: Authenticator) -> int:
    account = _load_account(args.account)
    orchestrator = authenticator.confirmations

    if args.action == "list":
        confirmations = await orchestrator.list_pending(account)
        _emit(
            [conf.model_dump(mode="json") for conf in confirmations],
            _format_confirmations(confirmations),
            args.json_output,
        )
        return _EXIT_OK

    pairs = [_parse_pair(text) for text in args.pairs]
    try:
        result = await orchestrator.act(account, args.action, pairs)
    except BatchFailedError as exc:
        _emit(exc.result.model_dump(mode="json"), _format_batch(exc.result), args.json_output)
        print(f"Error: {exc}", file=sys.stderr)
        return _EXIT_ERROR
    except LoginRequiredError as exc:
        if exc.result is not None:
            _emit(exc.result.model_dump(mode="json"), _format_batch(exc.result), args.json_output)
        raise

    _emit(result.model_dump(mode="json"), _format_batch(result), args.json_output)
    return _EXIT_OK


async def _handle_session(args: argparse.Namespace, authenticator: Authenticator) -> int:
    account_id = _account_id(args)
    sessions = authenticator.sessions

    if args.action == "set":
        sessions.upsert(
            account_id,
            session_token=args.session_token,
            auth_token=args.auth_token,
            extra_token=args.extra_token,
        )
        print(f"Session stored for {account_id}.")
        return _EXIT_OK

    if args.action == "clear":
        sessions.clear(account_id)
        print(f"Session cleared for {account_id}.")
        return _EXIT_OK

    if args.action == "validate":
        validation = sessions.validate(account_id)
        reason = validation.reason.value if validation.reason else None
        _emit(
            {"account_id": account_id, "valid": validation.valid, "reason": reason},
            "valid" if validation.valid else f"invalid: {reason}",
            args.json_output,
        )
        return _EXIT_OK if validation.valid else _EXIT_LOGIN_REQUIRED

    status = sessions.status(account_id)
    if status.age is None:
        text = f"No session stored for {account_id}."
    else:
        state = "valid" if status.valid else f"invalid ({status.reason.value})"
        text = (
            f"Session for {account_id}: {state}\n"
            f"  Age:        {status.age.age_formatted}\n"
            f"  Expires in: {status.age.expires_in_days} day(s)\n"
            f"  Last used:  {status.age.last_used_at or 'never'}\n"
            f"  Policy:     {status.max_age_days} day max age, "
            f"{status.idle_timeout_days} day idle timeout"
        )
    _emit(status.model_dump(mode="json"), text, args.json_output)
    return _EXIT_OK


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Build the components the command needs, dispatch, and clean up."""
    if args.command == "code" and args.timestamp is not None:
        return _handle_offline_code(args)

    authenticator = build_authenticator(app_settings)
    try:
        if args.command == "code":
            return await _handle_code(args, authenticator)
        if args.command == "confirmations":
            return await _handle_confirmations(args, authenticator)
        return await _handle_session(args, authenticator)
    finally:
        await authenticator.aclose()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the authenticator CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m steamguard.cli",
        description="Generate login codes and manage trade/market confirmations.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print results as JSON.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log at DEBUG level on stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- code --
    code_parser = subparsers.add_parser("code", help="Print the current login code")
    source = code_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--secret", help="Shared secret (base64 or 40 hex chars)")
    source.add_argument("--account", help="Path to an account JSON file")
    code_parser.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Generate for this epoch time instead of the synchronized clock",
    )

    # -- confirmations --
    conf_parser = subparsers.add_parser("confirmations", help="List or act on confirmations")
    conf_actions = conf_parser.add_subparsers(dest="action", required=True)

    list_parser = conf_actions.add_parser("list", help="Show pending confirmations")
    list_parser.add_argument("--account", required=True, help="Path to an account JSON file")

    for action in ("allow", "cancel"):
        act_parser = conf_actions.add_parser(action, help=f"{action.title()} confirmations")
        act_parser.add_argument("--account", required=True, help="Path to an account JSON file")
        act_parser.add_argument(
            "pairs",
            nargs="+",
            metavar="ID:KEY",
            help="Confirmations to act on, as printed by 'confirmations list'",
        )

    # -- session --
    session_parser = subparsers.add_parser("session", help="Manage stored session cookies")
    session_parser.add_argument("action", choices=["set", "validate", "info", "clear"])
    target = session_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--account", help="Path to an account JSON file")
    target.add_argument("--account-id", dest="account_id", help="Account id (steam id)")
    session_parser.add_argument("--session-token", dest="session_token", help="sessionid cookie")
    session_parser.add_argument("--auth-token", dest="auth_token", help="steamLoginSecure cookie")
    session_parser.add_argument("--extra-token", dest="extra_token", default=None,
                                help="Refresh token kept alongside the cookies")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, configures logging to stderr, runs the command and
    exits with its status code.  Known errors are printed without a
    traceback.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(_EXIT_ERROR)

    if args.command == "session" and args.action == "set" and not (
        args.session_token and args.auth_token
    ):
        parser.error("session set needs --session-token and --auth-token")

    app_settings = Settings()
    configure_logging(
        log_level="DEBUG" if args.verbose else app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    try:
        exit_code = asyncio.run(_run(args, app_settings))
    except LoginRequiredError as exc:
        reason = f" ({exc.reason})" if exc.reason else ""
        print(f"Login required{reason}: store a fresh session with 'session set'.",
              file=sys.stderr)
        exit_code = _EXIT_LOGIN_REQUIRED
    except SteamGuardError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = _EXIT_ERROR

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
