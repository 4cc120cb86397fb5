# trading/__init__.py
"""
FameEX spot adapter.

Provides:
- Endpoints & settings for the FameEX REST API
- Core domain enums & models, pair and order-code normalization
- Services for the currency/market catalogs, balances and order reconciliation
- Application-level TradeAPI for strategies/agents
"""
