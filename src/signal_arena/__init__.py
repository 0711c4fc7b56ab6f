"""Signal Arena: trading-signal intelligence on Hyperliquid perpetuals."""
