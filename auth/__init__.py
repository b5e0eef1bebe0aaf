"""auth/ -- Login proxy and identity reconciliation for ReqRes Bridge.

Layer rule: auth/ imports only core/, identity/, stdlib and third-party libraries.
It does NOT import from api/, users/, or posts/.
api/ imports from auth/, not the other way around.
"""
