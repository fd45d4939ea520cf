import re

EVM_ADDRESS = re.compile(r"^0x[a-fA-F0-9]{40}$")
SOLANA_ADDRESS = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_address(address: str) -> bool:
    return bool(EVM_ADDRESS.match(address) or SOLANA_ADDRESS.match(address))


def is_solana_address(address: str) -> bool:
    return bool(SOLANA_ADDRESS.match(address))
