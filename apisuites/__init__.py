"""
API automation suites for the JSONPlaceholder and reqres demo services.
"""
