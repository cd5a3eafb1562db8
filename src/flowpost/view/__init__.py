"""
The VIEW layer turns derived representations into renderable output:
per-point colors for the remote viewer and self-contained scene exports.
"""
