"""
Serving Module

HTTP facade over the analytics report queries.
"""
