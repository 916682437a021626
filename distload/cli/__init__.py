"""Command line interfaces for distload."""
