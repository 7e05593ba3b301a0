"""
HTTP interface for the valuation engine.
"""
