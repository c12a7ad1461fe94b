"""Command-line surface: `staticpack build | sync | recover | list`."""
