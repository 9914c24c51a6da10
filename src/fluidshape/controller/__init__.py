"""
The CONTROLLER layer connects the model to the outside world: the session
identity and the shared profile collections.
"""
