"""Conversion stages: processing, analysis and chart generation."""
