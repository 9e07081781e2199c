"""Core utilities: timezone handling and configuration."""
