"""Field and cross-field validators for intake steps."""
