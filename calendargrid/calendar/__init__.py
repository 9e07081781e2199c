"""Calendar feed models and datetime parsing."""
