"""Network metadata and token tables for the supported test networks."""

from typing import Any, Dict, List

# Keyed by network key → constructor kwargs for ``NetworkConfig``.
NETWORK_METADATA: Dict[str, Dict[str, Any]] = {
    'MONAD': {
        'name': 'Monad Testnet',
        'chain_id': 10143,
        'rpc_url': 'https://testnet-rpc.monad.xyz',
        'native_currency': 'MON',
        'block_explorer_url': 'https://testnet.monadexplorer.com',
        'router_address': '0xfb8e1c3b833f9e67a71c859a132cf783b645e436',
        'factory_address': '0x733e88f248b742db6c14c0b1713af5ad7fdd59d0',
        'wrapped_native_address': '0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701',
        'indexer_chain': 'monad',
        'tokens': {
            'WETH': {
                'address': '0xB5a30b0FDc5EA94A52fDc42e3E9760Cb8449Fb37',
                'symbol': 'WETH',
                'name': 'Wrapped Ethereum',
                'decimals': 18,
                'logo_uri': 'https://assets.coingecko.com/coins/images/279/small/ethereum.png',
            },
            'WBTC': {
                'address': '0xcf5a6076cfa32686c0Df13aBaDa2b40dec133F1d',
                'symbol': 'WBTC',
                'name': 'Wrapped Bitcoin',
                'decimals': 18,
                'logo_uri': 'https://assets.coingecko.com/coins/images/1/small/bitcoin.png',
            },
            'USDC': {
                'address': '0xf817257fed379853cDe0fa4F97AB987181B1E5Ea',
                'symbol': 'USDC',
                'name': 'USD Coin',
                'decimals': 6,
                'logo_uri': 'https://assets.coingecko.com/coins/images/6319/small/USD_Coin_icon.png',
            },
            'USDT': {
                'address': '0x88b8E2161DEDC77EF4ab7585569D2415a1C1055D',
                'symbol': 'USDT',
                'name': 'Tether USD',
                'decimals': 6,
                'logo_uri': 'https://assets.coingecko.com/coins/images/325/small/Tether.png',
            },
            'WSOL': {
                'address': '0x5387C85A4965769f6B0Df430638a1388493486F1',
                'symbol': 'WSOL',
                'name': 'Wrapped Solana',
                'decimals': 18,
                'logo_uri': 'https://assets.coingecko.com/coins/images/4128/small/solana.png',
            },
        },
    },
    'MEGAETH': {
        'name': 'MegaETH Testnet',
        'chain_id': 6342,
        'rpc_url': 'https://carrot.megaeth.com/rpc',
        'native_currency': 'ETH',
        'block_explorer_url': 'https://megaexplorer.xyz',
        # No router or factory deployed yet; swaps are rejected up front.
        'router_address': '0x0000000000000000000000000000000000000000',
        'factory_address': '0x0000000000000000000000000000000000000000',
        'wrapped_native_address': '0x4eb2bd7bee16f38b1f4a0a5796fffd028b6040e9',
        'indexer_chain': None,
        'tokens': {
            'ETH': {
                'address': '0x4eb2bd7bee16f38b1f4a0a5796fffd028b6040e9',
                'symbol': 'ETH',
                'name': 'Ethereum',
                'decimals': 18,
                'logo_uri': 'https://assets.coingecko.com/coins/images/279/small/ethereum.png',
            },
            'USDC': {
                'address': '0x8d635c4702ba38b1f1735e8e784c7265dcc0b623',
                'symbol': 'USDC',
                'name': 'USD Coin',
                'decimals': 6,
                'logo_uri': 'https://assets.coingecko.com/coins/images/6319/small/USD_Coin_icon.png',
            },
            'BRONTO': {
                'address': '0x9a9b33227fa5d386987a5892a7f0b730c9ba3e22',
                'symbol': 'BRONTO',
                'name': 'Bronto',
                'decimals': 18,
            },
            'MEGA': {
                'address': '0xd02a3d7f7f3ba8e8dc4059b931b737b8ca59209a',
                'symbol': 'MEGA',
                'name': 'Mega',
                'decimals': 18,
            },
            'WBTC': {
                'address': '0xfe928dd7d9cda6bcf7f2600b4a0e9726ae4d2577',
                'symbol': 'WBTC',
                'name': 'Wrapped Bitcoin',
                'decimals': 8,
                'logo_uri': 'https://assets.coingecko.com/coins/images/1/small/bitcoin.png',
            },
        },
    },
}

# Addresses probed during scans in addition to each network's token table.
POPULAR_TOKENS: Dict[str, List[str]] = {
    'MONAD': [
        '0xB5a30b0FDc5EA94A52fDc42e3E9760Cb8449Fb37',  # WETH
        '0xcf5a6076cfa32686c0Df13aBaDa2b40dec133F1d',  # WBTC
        '0xf817257fed379853cDe0fa4F97AB987181B1E5Ea',  # USDC
        '0x88b8E2161DEDC77EF4ab7585569D2415a1C1055D',  # USDT
        '0x5387C85A4965769f6B0Df430638a1388493486F1',  # WSOL
    ],
    'MEGAETH': [],
}

__all__ = [
    'NETWORK_METADATA',
    'POPULAR_TOKENS',
]
