"""
Test suite for curvemarket

Contains:
- tests/unit/          : Unit tests for math, domain, contracts and engine
"""
