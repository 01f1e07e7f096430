"""Intake wizard: state, validation, drafts, review."""
