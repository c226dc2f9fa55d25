"""Command-line front end for monger."""
