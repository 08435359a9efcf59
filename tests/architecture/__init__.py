"""Architecture validation tests.

These tests verify that the codebase keeps its layering: domain ports at the
centre, application logic on top of them, adapters at the edge.
"""
