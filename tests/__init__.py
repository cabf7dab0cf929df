"""Test suite for Money Keeper."""
