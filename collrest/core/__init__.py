"""Core utilities shared across collrest: errors and logging."""
