"""Pydantic schemas for generation requests and results."""
