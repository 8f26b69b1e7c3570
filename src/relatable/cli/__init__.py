"""relatable command-line interface."""
