"""Core modules for stackops.

This package turns deployment snapshot resources into framework components
and answers log and metric queries about them against AWS.
"""
