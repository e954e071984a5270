"""
Infrastructure layer: NumPy tensor engine, graph runtime and utilities.
"""
