"""Coach Gateway: health snapshot and AI training-plan service."""
