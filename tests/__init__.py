# ============================================
# Test Suite for healthrisk
# ============================================
"""
Test package containing unit tests.

Run all tests:
    pytest tests/

Skip the slower training tests:
    pytest -m "not slow" tests/
"""
