"""HTTP surface for the intake wizard."""
