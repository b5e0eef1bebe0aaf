"""posts/ -- CRUD operations on posts written by locally saved users.

Layer rule: posts/ imports only core/, identity/, stdlib and third-party libraries.
"""
