"""
curvemarket — Constrained bonding curve prediction market engine.

Цена опции i: supply_i / (total_supply + k). Все цены строго меньше 1.0,
их сумма не превышает 1.0.
"""

__version__ = "0.1.0"
