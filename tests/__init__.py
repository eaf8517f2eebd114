"""
Test suite for Retail Replenishment.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_replenishment_evaluator.py -v
"""
