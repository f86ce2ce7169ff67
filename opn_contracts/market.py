import os
from decimal import Decimal
from typing import Optional

import requests

from opn_contracts.constants import (
    COINMARKETCAP_API_KEY_ENVVAR,
    COINMARKETCAP_QUOTES_URL,
    NATIVE_CURRENCY,
)


def get_usd_price(
    symbol: str = NATIVE_CURRENCY,
    api_key: Optional[str] = None,
    api_url: str = COINMARKETCAP_QUOTES_URL,
) -> Decimal:
    """Latest USD quote for a token symbol from the CoinMarketCap API."""
    api_key = api_key or os.environ.get(COINMARKETCAP_API_KEY_ENVVAR)
    if not api_key:
        raise ValueError(f"{COINMARKETCAP_API_KEY_ENVVAR} is not set.")

    response = requests.get(
        api_url,
        params={"symbol": symbol, "convert": "USD"},
        headers={"X-CMC_PRO_API_KEY": api_key, "Accept": "application/json"},
    )
    response.raise_for_status()
    quotes = response.json().get("data", {}).get(symbol) or []
    if not quotes:
        raise ValueError(f"No USD quote available for {symbol}.")
    return Decimal(str(quotes[0]["quote"]["USD"]["price"]))


def usd_cost(gas: int, gas_price: int, usd_price: Decimal) -> Decimal:
    """USD cost of `gas` units at `gas_price` wei per unit."""
    return Decimal(gas * gas_price) / Decimal(10**18) * usd_price
