"""Integration tests for volleytrack collaborators."""
