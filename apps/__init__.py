"""Django apps of the venue reservation engine."""
