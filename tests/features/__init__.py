"""
End-to-end tests for the alignment pipeline.
"""
