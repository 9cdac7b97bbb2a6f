"""Agno agent logic for document analysis.

Handles all traffic with the LLM service.

Responsibilities:
    - Agent initialization with OpenAI (or Gemini) models
    - Structured summary requests and strict response validation
    - Grounded question answering with explicit conversation history
    - Streaming token generation coordination

Leverages the Agno framework for model access.
Maintains clean separation from the HTTP and session layers.
"""

from analysis_hub.agent.analysis_agent import AnalysisService, get_analysis_service
from analysis_hub.agent.config import AgentConfig, get_agent_config

__all__ = ["AgentConfig", "AnalysisService", "get_agent_config", "get_analysis_service"]
