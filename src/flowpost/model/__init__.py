"""
The MODEL layer contains the session state, the value types passed between
components and the codec adapters for the wire representation.
It has no knowledge of filters or rendering.
"""
