from tradebot.services.token_resolution import ResolutionSource, resolve_token, resolve_token_address


def test_address_passes_through_unchanged(monad):
    usdc = monad.token_by_symbol("USDC")
    lowered = usdc.address.lower()

    resolution = resolve_token(lowered, monad)

    assert resolution.address == lowered
    assert resolution.verified is True
    assert resolution.decimals == 6


def test_unknown_address_is_unverified(monad):
    address = "0x1234567890abcdef1234567890abcdef12345678"
    resolution = resolve_token(address, monad)
    assert resolution.address == address
    assert resolution.verified is False
    assert resolution.source == ResolutionSource.EXACT_ADDRESS


def test_native_symbol_maps_to_wrapped_native(monad):
    resolution = resolve_token("mon", monad)
    assert resolution.address == monad.wrapped_native_address
    assert resolution.is_native is True
    assert resolution.decimals == 18


def test_symbol_lookup_is_case_insensitive(monad):
    assert resolve_token_address("usdc", monad) == monad.token_by_symbol("USDC").address
    assert resolve_token("Usdt", "monad").verified is True


def test_unknown_symbol_returned_unverified(monad):
    resolution = resolve_token("NOPE", monad)
    assert resolution.address == "NOPE"
    assert resolution.verified is False
    assert resolution.source == ResolutionSource.UNVERIFIED
