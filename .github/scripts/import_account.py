#!/usr/bin/env python3

import os

from ape_accounts import import_account_from_private_key

DEFAULT_ALIAS = "OPN_DEPLOYER"


def main():
    try:
        passphrase = os.environ["DEPLOYER_PASSPHRASE"]
        private_key = os.environ["PRIVATE_KEY"]
    except KeyError:
        raise Exception(
            "There are missing environment variables. "
            "Please set DEPLOYER_PASSPHRASE and PRIVATE_KEY."
        )
    alias = os.environ.get("DEPLOYER_ALIAS", DEFAULT_ALIAS)
    account = import_account_from_private_key(alias, passphrase, private_key)
    print(f"Account imported as {alias}: {account.address}")


if __name__ == "__main__":
    main()
