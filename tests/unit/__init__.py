"""
Unit tests for the Smart Contract Assistant.

Test individual components in isolation:
- Error classification and the retry / completion engine
- Provider client (httpx MockTransport) and client lifecycle
- Prompt builder, session stores, redaction, telemetry
- Contract spec validation and code generation
- Assistant conversation flow and API models / dependencies
"""
