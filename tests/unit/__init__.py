"""
Unit tests for the healthrisk package.
"""
