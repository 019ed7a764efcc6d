"""
BoneScan AI

Turns a vision model's free-form reading of an X-ray into a validated,
rule-corrected diagnostic record and a downloadable PDF report.
"""
__version__ = "1.0.0"
