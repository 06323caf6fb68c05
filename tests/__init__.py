"""
Topic Alignment - Test Suite
"""
