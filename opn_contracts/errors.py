import functools
import re

import click
from ape.exceptions import CustomError

from opn_contracts.constants import ACCESS_CONTROL_REVERT

USER_REJECTED_CODE = "ACTION_REJECTED"
CANCELLED = "Transaction cancelled"
INSUFFICIENT_FUNDS = "Insufficient funds"
FAILED = "Transaction failed"

REVERT_REASON_PATTERN = re.compile(r"reverted with reason string '([^']+)'")


class InsufficientBalance(Exception):
    """Raised when the transacting account cannot pay for gas."""


class MissingAdminPrivilege(Exception):
    """Raised when the transacting account lacks the role needed to grant another."""


class RoleGrantFailed(Exception):
    """Raised when a role grant did not take effect on-chain."""


def _error_text(error) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)


def is_access_control_error(error) -> bool:
    """
    True for AccessControl reverts, both the OpenZeppelin 5 custom errors
    (`AccessControlUnauthorizedAccount`) and the older reason strings.
    """
    if isinstance(error, CustomError) and error.name.startswith(ACCESS_CONTROL_REVERT):
        return True
    return ACCESS_CONTROL_REVERT in _error_text(error)


def get_error_message(error) -> str:
    """Maps a transaction error to a short message fit for display."""
    message = _error_text(error)

    if getattr(error, "code", None) == USER_REJECTED_CODE or "user rejected" in message:
        return CANCELLED

    if "insufficient funds" in message:
        return INSUFFICIENT_FUNDS

    revert_match = REVERT_REASON_PATTERN.search(message)
    if revert_match:
        return revert_match.group(1)
    if "execution reverted" in message:
        return FAILED

    if isinstance(error, CustomError):
        return error.name

    # ape's ContractLogicError carries the decoded reason as revert_message
    reason = getattr(error, "reason", None) or getattr(error, "revert_message", None)
    if reason:
        return str(reason)

    return FAILED


def _hint(error) -> str:
    message = _error_text(error)
    if isinstance(error, InsufficientBalance) or "insufficient funds" in message:
        return "Make sure the account holds enough native tokens for gas."
    if isinstance(error, MissingAdminPrivilege) or is_access_control_error(error):
        return "Run this with an account that holds the contract's admin role."
    if "Only admin" in message:
        return "Make sure your account has ADMIN_ROLE."
    return ""


def exit_on_error(func):
    """Reports any error raised by a script entrypoint on stderr and exits with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.exceptions.Abort, SystemExit):
            raise
        except Exception as error:
            click.secho(f"\n(!) {get_error_message(error)}", fg="red", err=True)
            click.secho(f"    {type(error).__name__}: {error}", err=True)
            hint = _hint(error)
            if hint:
                click.secho(f"    Tip: {hint}", fg="yellow", err=True)
            raise click.exceptions.Exit(1)

    return wrapper
