import pytest

from src.bot.validators import is_solana_address, is_valid_address


@pytest.mark.parametrize("address", [
    "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "So11111111111111111111111111111111111111112",
    "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",
])
def test_valid(address) -> None:
    assert is_valid_address(address)


@pytest.mark.parametrize("address", [
    "",
    "0x123",
    "0xdAC17F958D2ee523a2206206994597C13D831ecZ",
    "So1111111111111111111111111111111111111111O",  # 'O' is not base58
    "hello world",
])
def test_invalid(address) -> None:
    assert not is_valid_address(address)


def test_solana_detection() -> None:
    assert is_solana_address("So11111111111111111111111111111111111111112")
    assert not is_solana_address("0xdAC17F958D2ee523a2206206994597C13D831ec7")
