"""Domain layer: pure layout, identifier, and directory rules.

No I/O happens here. Functions take resolved values and return values.
"""
