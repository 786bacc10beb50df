"""Test fixture factories."""
