"""Command line tool for inflating helm charts."""
