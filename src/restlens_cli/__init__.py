"""Command-line interface for the REST Lens annotator"""
