"""Schema-to-tool compilation and execution.

Turns the root fields of an introspected GraphQL schema into tools with
a JSON-Schema input contract, and executes them against the backend.
"""
