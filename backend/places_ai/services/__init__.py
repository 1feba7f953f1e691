"""
Favorite Places AI Backend - Services Layer
============================================

Service Inventory:
    - TextGenerator (abstract): interface for the generative text model
    - GeminiTextGenerator: Google Gemini implementation
    - ImageSignalExtractor (abstract): optional photo enrichment
      (CloudVisionSignalExtractor / NoImageSignalExtractor)
    - prompt_builder: pure prompt construction
    - response_parser: JSON recovery from free-form model text
    - AIService: the three task orchestrators
"""
