from decimal import Decimal, InvalidOperation

import click
from eth_utils import to_checksum_address
from web3 import Web3

from opn_contracts.constants import NATIVE_CURRENCY


class WeiAmount(click.ParamType):
    """A non-negative amount, either in wei or suffixed with the native currency (``0.5 OPN``)."""

    name = "wei_amount"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            amount = value
        else:
            text = str(value).strip()
            try:
                if text.upper().endswith(NATIVE_CURRENCY):
                    units = Decimal(text[: -len(NATIVE_CURRENCY)].strip())
                    amount = Web3.to_wei(units, "ether")
                else:
                    amount = int(text)
            except (InvalidOperation, ValueError):
                self.fail(f"{value} is not an amount in wei or {NATIVE_CURRENCY}", param, ctx)
        if amount < 0:
            self.fail(f"{value} is negative", param, ctx)
        return amount


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            return to_checksum_address(value)
        except ValueError:
            self.fail(f"{value} is not a valid address", param, ctx)
