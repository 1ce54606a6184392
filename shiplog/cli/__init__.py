"""shiplog command line interface."""
