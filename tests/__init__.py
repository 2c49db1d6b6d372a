"""
Test suite for vddl.

Unit tests live under tests/unit and run against the in-memory catalog.
"""
