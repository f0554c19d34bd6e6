"""OmniChat API validator."""
