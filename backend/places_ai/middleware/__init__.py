"""
Favorite Places AI Backend - Middleware Package
================================================

Middleware Chain (request direction):
    [CORS] → [Request ID] → [Logging] → [Rate Limit, /ai/ only] → [GZip] → Route

CORS wraps everything, so preflights never reach the rate limiter and
429 responses are still readable by browser clients. The request ID is set
next so the access log line and any rate-limit rejection can be correlated.
"""
