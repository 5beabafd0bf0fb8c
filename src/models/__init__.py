"""Pydantic models for risk assessments, SPIs, compliance facts and alerts."""
