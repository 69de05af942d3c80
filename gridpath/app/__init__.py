"""Qt controller and run-state machine that pace the search."""
