"""
Integration tests for the Smart Contract Assistant.

Test components together:
- API endpoints through FastAPI TestClient (routing, dependencies,
  middleware, exception handlers) with a scripted provider client
"""
