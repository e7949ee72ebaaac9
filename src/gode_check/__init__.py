"""gode-check command line interface."""
