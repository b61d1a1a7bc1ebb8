"""Tests for helm-inflator."""
