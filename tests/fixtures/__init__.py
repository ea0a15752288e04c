"""
Test fixtures for the Smart Contract Assistant.

Files:
- token_spec.json: ERC-20 style contract specification (state variables,
  constructor, view and state-changing functions)
"""
