"""Robin command line interface."""
