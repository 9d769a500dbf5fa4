"""
HTTP middleware, registered in main.py (outermost first):
CORS -> request id -> security headers -> request logging -> rate limiting
"""
