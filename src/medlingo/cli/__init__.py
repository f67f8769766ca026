"""Command line interface for medlingo."""
