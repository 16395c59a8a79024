from ..services.trading import TradingService, get_trading_service


def trading_service() -> TradingService:
    """FastAPI dependency; overridden in tests."""
    return get_trading_service()
