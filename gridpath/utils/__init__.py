"""Grid factories, seeded randomness and layout persistence."""
