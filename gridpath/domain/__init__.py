"""Framework-agnostic grid and search engine."""
