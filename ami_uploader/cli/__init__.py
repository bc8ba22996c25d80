"""Command line interface for ami-uploader."""
