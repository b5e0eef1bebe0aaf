"""identity/ -- Local persistence for imported users and their posts.

Layer rule: identity/ imports only core/, stdlib and third-party libraries.
It does NOT import from api/, auth/, users/, or posts/.
"""
