"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Service
PORT: int = int(os.getenv("PORT", "9000"))

# Collaborator base URLs
RAG_SERVICE_URL: str = os.getenv("RAG_SERVICE_URL", "http://localhost:8084").strip().rstrip("/")
MCP_GATEWAY_URL: str = os.getenv("MCP_GATEWAY_URL", "http://localhost:9100").strip().rstrip("/")

# Knowledge partitions the planner may search (first one is the fallback)
KNOWLEDGE_COLLECTIONS: tuple[str, ...] = ("regulatory_docs", "merchant_docs", "kyc_docs")
DEFAULT_COLLECTION: str = KNOWLEDGE_COLLECTIONS[0]
DEFAULT_TOP_K: int = 5

# Tools registered behind the MCP gateway
AVAILABLE_TOOLS: tuple[str, ...] = ("verify-docs", "risk-score", "web-search", "data-extractor")

# Identifier recorded in AgentResult.sources for a successful retrieval
RETRIEVAL_SOURCE_NAME: str = "RAG Knowledge Base"

# API timeouts (seconds)
LLM_API_TIMEOUT: float = 60.0
RETRIEVAL_HTTP_TIMEOUT: float = 30.0
TOOLS_HTTP_TIMEOUT: float = 15.0

# Agent loop
MAX_ITERATIONS: int = int(os.getenv("MAX_ITERATIONS", "5"))
CONFIDENCE_THRESHOLD: float = float(os.getenv("CONFIDENCE_THRESHOLD", "0.7"))

# Token budgets per phase
ANALYZE_MAX_TOKENS: int = 200
PLAN_MAX_TOKENS: int = 800
SYNTHESIZE_MAX_TOKENS: int = 700
VERIFY_MAX_TOKENS: int = 200

# OpenAI (agent LLM). When set, the agent uses OpenAI instead of Hugging Face.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# Hugging Face chat (fallback LLM)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)
