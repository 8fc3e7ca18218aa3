"""Pipeline steps package.

This package contains the individual steps in the sequence generation pipeline:
- prospect_analyzer: Analyzes the prospect profile (pass 1)
- sequence_composer: Generates and stores the message sequence (pass 2)
"""
