"""
Unit Tests for the Tabular Q-Learning Package.

    - test_core: configuration, state canonicalization, value table
    - test_agent: update rule, action selection, episode state machine
    - test_persistence: policy snapshot round-trips and error handling
    - test_training: driver loop, GridWorld, diagnostics and CLI
"""
