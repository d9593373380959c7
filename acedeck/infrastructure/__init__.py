"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (AI APIs, the response store,
the file system, the terminal) by implementing the interfaces defined in the
domain layer.
"""
