"""
Gangcore - Gang progression and economy core.

An in-process library for a persistent multiplayer game server.
It tracks each gang's:
- Experience and level (soft/hard capped growth curve)
- Owned upgrades (level-gated, category-tagged catalog)
- Active doctrine (one exclusive specialization at a time)
- Premium credit balance (monetized actions with a store CTA)

All mutations go through GangProgressionFacade, which serializes
them per gang.
"""

__version__ = "0.1.0"
