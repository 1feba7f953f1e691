"""
Favorite Places AI Backend - API Routes Package
================================================

Route Inventory:
    - ai.py:      POST /ai/summarize-notes
                  POST /ai/suggest-tags
                  POST /ai/smart-search
    - health.py:  GET  /           (service info)
                  GET  /health     (liveness and dependency configuration)

Routes stay thin: unpack the body, call AIService, return its model.
Errors are rendered by the global handlers in main.py.
"""
