"""
Smart Contract Assistant backend.

Chat API that proxies an OpenAI-compatible chat-completion provider and turns
the resulting contract specifications into source code:
- Resilient completion calls (backoff, per-attempt timeouts, error taxonomy)
- Per-client conversation sessions (in-memory or Redis)
- Template-based Solidity / Vyper / Rust (ink!) generators

Architecture: FastAPI handlers + CompletionEngine + httpx provider client
"""

__version__ = "0.1.0"
