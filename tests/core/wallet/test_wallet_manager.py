"""
Tests for wallet custody: generation, import, encryption at rest.
"""

import pytest
from eth_account import Account

from tradebot.core.recovery.errors import InvalidKeyError, WalletNotFoundError
from tradebot.core.wallet import InMemoryWalletStore, KeyCipher, KeyCipherError, WalletManager


KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def store():
    return InMemoryWalletStore()


@pytest.fixture
def manager(store):
    return WalletManager(store=store, cipher=KeyCipher("unit-test-secret"))


def test_cipher_round_trip_with_fresh_nonce():
    cipher = KeyCipher("unit-test-secret")
    first = cipher.encrypt("0x" + KEY)
    second = cipher.encrypt("0x" + KEY)

    assert first != second
    assert first.split(":")[0] != second.split(":")[0]
    assert len(bytes.fromhex(first.split(":")[0])) == 12
    assert cipher.decrypt(first) == "0x" + KEY


def test_cipher_rejects_other_secret_and_tampering():
    payload = KeyCipher("secret-a").encrypt("hello")

    with pytest.raises(KeyCipherError):
        KeyCipher("secret-b").decrypt(payload)

    nonce, ciphertext = payload.split(":")
    tampered = f"{nonce}:{'00' if ciphertext[:2] != '00' else '11'}{ciphertext[2:]}"
    with pytest.raises(KeyCipherError):
        KeyCipher("secret-a").decrypt(tampered)

    with pytest.raises(KeyCipherError):
        KeyCipher("secret-a").decrypt("not-a-payload")


def test_cipher_requires_secret():
    with pytest.raises(KeyCipherError):
        KeyCipher("")


@pytest.mark.asyncio
async def test_generate_returns_mnemonic_and_encrypts_key(manager, store):
    created = await manager.generate("user-1")

    assert len(created.mnemonic.split()) == 12
    record = await store.get(created.handle.wallet_id)
    revealed = await manager.reveal(created.handle.wallet_id)

    assert Account.from_key(revealed).address == created.handle.address
    assert revealed.replace("0x", "") not in record.encrypted_private_key
    assert created.handle.name == "Default Wallet"


@pytest.mark.asyncio
async def test_import_accepts_key_with_or_without_prefix(manager):
    expected = Account.from_key("0x" + KEY).address

    bare = await manager.import_wallet("user-1", KEY)
    prefixed = await manager.import_wallet("user-2", "0x" + KEY)

    assert bare.address == prefixed.address == expected
    assert bare.name == "Imported Wallet"
    assert await manager.reveal(bare.wallet_id) == "0x" + KEY


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_key", [KEY[:-2], KEY + "00", "zz" * 32, "", "ff" * 32])
async def test_invalid_key_stores_nothing(manager, store, raw_key):
    with pytest.raises(InvalidKeyError) as exc_info:
        await manager.import_wallet("user-1", raw_key)

    assert await store.list_for_owner("user-1") == []
    assert await manager.has_wallet("user-1") is False
    if raw_key:
        assert raw_key not in str(exc_info.value.to_dict())


@pytest.mark.asyncio
async def test_wallet_details_default_to_first_wallet(manager):
    first = await manager.import_wallet("user-1", KEY)
    second = (await manager.generate("user-1", name="Trading")).handle

    assert await manager.get_wallet_details("user-1") == first
    assert await manager.get_wallet_details("user-1", second.wallet_id) == second
    assert [h.wallet_id for h in await manager.list("user-1")] == [first.wallet_id, second.wallet_id]

    with pytest.raises(WalletNotFoundError):
        await manager.get_wallet_details("user-1", "missing")
    with pytest.raises(WalletNotFoundError):
        await manager.get_wallet_details("nobody")


@pytest.mark.asyncio
async def test_owner_lookup_and_delete(manager):
    handle = await manager.import_wallet("user-1", KEY)

    assert await manager.get_wallet_owner(handle.address.lower()) == "user-1"
    assert await manager.delete("user-2", handle.wallet_id) is False
    assert await manager.delete("user-1", handle.wallet_id) is True
    assert await manager.has_wallet("user-1") is False
    assert await manager.get_wallet_owner(handle.address) is None
    with pytest.raises(WalletNotFoundError):
        await manager.reveal(handle.wallet_id)


def test_address_explorer_url(monad):
    url = WalletManager.address_explorer_url("0xabc", "MONAD")
    assert url == f"{monad.block_explorer_url}/address/0xabc"
