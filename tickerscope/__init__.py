"""Ticker snapshot engine: timeframe-aware price series and trading statistics."""
