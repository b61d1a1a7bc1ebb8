"""Tests for the helm-inflator command line tool."""
