"""
Test suite for coin-shop-drill

Contains:
- tests/unit/          : Unit tests for individual modules
"""
