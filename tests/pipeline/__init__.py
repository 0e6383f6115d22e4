"""
Pipeline Tests Package
======================
Test suite for the grammar checking pipeline and its engines.

Run all tests: python3 -m pytest tests/pipeline/ -v
Run specific: python3 -m pytest tests/pipeline/test_service.py -v
"""

__version__ = "1.0.0"
