from tradebot.services.address import (
    checksum,
    is_evm_address,
    is_private_key_hex,
    is_zero_address,
    normalize_network,
    same_address,
)


def test_normalize_network_defaults_to_monad():
    assert normalize_network(None) == "MONAD"
    assert normalize_network(" monad ") == "MONAD"


def test_normalize_network_aliases():
    assert normalize_network("mon") == "MONAD"
    assert normalize_network("mega") == "MEGAETH"
    assert normalize_network("megaeth-testnet") == "MEGAETH"
    assert normalize_network("sepolia") == "SEPOLIA"


def test_address_validation_evm():
    address = "0x1234567890abcdef1234567890ABCDEF12345678"
    assert is_evm_address(address) is True
    assert is_evm_address(address[:-1]) is False
    assert is_evm_address("1234567890abcdef1234567890ABCDEF12345678") is False
    assert is_evm_address(None) is False


def test_zero_address():
    assert is_zero_address("0x" + "0" * 40) is True
    assert is_zero_address("0x" + "0" * 39 + "1") is False
    assert is_zero_address("") is False


def test_checksum_and_comparison():
    lower = "0x760afe86e5de5fa0ee542fc7b7b713e1c5425701"
    assert checksum(lower) == "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701"
    assert same_address(lower, checksum(lower)) is True
    assert same_address(lower, None) is False


def test_private_key_format():
    key = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
    assert is_private_key_hex(key) is True
    assert is_private_key_hex("0x" + key) is True
    assert is_private_key_hex(key[:-2]) is False
    assert is_private_key_hex("0x" + "g" * 64) is False
