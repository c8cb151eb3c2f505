"""
codeforge: turns natural-language requests into validated, optimized source files through a staged LLM pipeline.
"""

from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.pipeline_orchestrator import PipelineOrchestrator
from codeforge.config import Settings, get_settings
from codeforge.domain.models import GenerationRequest, PipelineResult

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "GenerationRequest",
    "PipelineOrchestrator",
    "PipelineResult",
    "Settings",
    "get_settings",
]
