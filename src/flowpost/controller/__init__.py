"""
The CONTROLLER layer holds the mesh query and processing operations.
Each module works on an explicit SessionState and commits to it only after
the operation has fully succeeded.
"""
