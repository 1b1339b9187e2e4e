from __future__ import annotations

from setuptools import find_packages
from setuptools import setup

setup(
    name="faucet-relay",
    version="0.1.0",
    description="Captcha-gated, rate-limited relay for on-chain native token faucets",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"faucet_relay.contracts.abi": ["*.json"]},
    python_requires=">=3.11",
    install_requires=[
        "aiohttp",
        "anyio>=4",
        "certifi",
        "eth-abi",
        "eth-account",
        "eth-keys",
        "eth-typing",
        "eth-utils",
        "fastapi",
        "hexbytes",
        "httpx",
        "hypercorn",
        "importlib_resources",
        "pydantic>=2",
        "pydantic-settings",
        "PyYAML",
        "typing_extensions",
        "web3>=7",
    ],
    extras_require={
        "test": [
            "pytest",
            "web3[tester]>=7",
        ],
    },
    entry_points={
        "console_scripts": [
            "faucet-relay = faucet_relay.run:run",
        ],
    },
)
