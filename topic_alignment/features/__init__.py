"""Modeling features for the alignment pipeline."""
