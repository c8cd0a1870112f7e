"""Pydantic projections handed to observers and the presentation layer."""
