"""
Favorite Places AI Backend - Application Package
=================================================

What: Marks the `places_ai` directory as a Python package.
Who:  Used by uvicorn (`uvicorn places_ai.main:app`) and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (AI Orchestration)       │  ← prompts, model calls, extraction
    ├─────────────────────────────────────┤
    │        Schemas (Data Contracts)     │  ← Pydantic request/response models
    └─────────────────────────────────────┘

    Nothing is persisted: every value lives for one request only.
"""

__version__ = "1.0.0"
