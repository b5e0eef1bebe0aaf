"""users/ -- Import and management of locally saved users.

Layer rule: users/ imports only core/, identity/, stdlib and third-party libraries.
"""
