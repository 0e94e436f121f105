"""Onboarding project store service."""
