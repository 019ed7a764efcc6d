"""
Core analysis pipeline: parsing, validation, clinical rules, reports, and the
vision model boundary.
"""
