"""Helpers for preparing, inspecting and integrating AppImages."""

__version__ = "0.1.0"