"""
Test suite for audiocd.

This package contains:
- Unit tests for sector arithmetic, the TOC model, settings and the
  sector stream state machine
- Integration tests for complete ripping workflows
- Mock fixtures for testing without a physical drive
"""
