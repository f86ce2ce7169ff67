"""
Hand-off to the web frontend: the contract addresses it reads from its
environment and the Vite bundler settings it builds with.
"""

import json
from collections import OrderedDict
from pathlib import Path
from typing import Dict

from opn_contracts.constants import (
    ASSET_REGISTRY,
    GOVERNANCE,
    POSITION_NFT,
    PRIMARY_MARKET,
    SECONDARY_MARKET,
    TOKENIZATION,
)
from opn_contracts.manifest import DeploymentManifest

FRONTEND_ENV_VARS = OrderedDict(
    [
        (ASSET_REGISTRY, "VITE_ASSET_REGISTRY"),
        (POSITION_NFT, "VITE_POSITION_NFT"),
        (PRIMARY_MARKET, "VITE_PRIMARY_MARKET"),
        (SECONDARY_MARKET, "VITE_SECONDARY_MARKET"),
        (GOVERNANCE, "VITE_GOVERNANCE"),
        (TOKENIZATION, "VITE_TOKENIZATION_CONTRACT"),
    ]
)
CHAIN_ID_ENV_VAR = "VITE_CHAIN_ID"

MANUAL_CHUNKS = OrderedDict(
    [
        ("react-vendor", ["react", "react-dom", "react-router-dom"]),
        ("ethers-vendor", ["ethers"]),
        ("ui-vendor", ["lucide-react"]),
        (
            "wallet-vendor",
            ["@reown/appkit", "@reown/appkit/react", "@reown/appkit-adapter-ethers5"],
        ),
    ]
)

# dependencies pre-bundled on dev server start, avoids "Outdated Optimize Dep" 504s
OPTIMIZED_DEPS = [
    "react",
    "react-dom",
    "react-router-dom",
    "ethers",
    "lucide-react",
    "@reown/appkit",
    "@reown/appkit/react",
    "@reown/appkit-adapter-ethers5",
]

DEV_SERVER_PORT = 5173
PREVIEW_PORT = 3000
OUTPUT_DIR = "dist"
CHUNK_SIZE_WARNING_LIMIT = 1000


def build_config() -> Dict:
    """The Vite settings, in the shape of a vite config object."""
    return {
        "optimizeDeps": {"include": list(OPTIMIZED_DEPS), "force": True},
        "server": {
            "port": DEV_SERVER_PORT,
            "host": True,
            "historyApiFallback": True,
            "fs": {"strict": False},
        },
        "build": {
            "outDir": OUTPUT_DIR,
            "sourcemap": False,
            "minify": "terser",
            "rollupOptions": {"output": {"manualChunks": dict(MANUAL_CHUNKS)}},
            "chunkSizeWarningLimit": CHUNK_SIZE_WARNING_LIMIT,
        },
        "preview": {"port": PREVIEW_PORT, "host": True, "historyApiFallback": True},
    }


def frontend_env(manifest: DeploymentManifest) -> Dict[str, str]:
    env = OrderedDict()
    for contract_name, env_var in FRONTEND_ENV_VARS.items():
        address = manifest.contracts.get(contract_name)
        if address:
            env[env_var] = address
    env[CHAIN_ID_ENV_VAR] = str(manifest.chain_id)
    return env


def write_frontend_env(manifest: DeploymentManifest, filepath: Path) -> Path:
    lines = [f"{key}={value}" for key, value in frontend_env(manifest).items()]
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text("\n".join(lines) + "\n")
    return filepath


def write_build_config(filepath: Path) -> Path:
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(build_config(), file, indent=2)
    return filepath
