"""Fixture package exercising case-source references."""
