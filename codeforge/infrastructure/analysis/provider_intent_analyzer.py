"""Intent analysis delegated to the provider, validated with pydantic."""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from codeforge.application.interfaces.iintent_analyzer import IIntentAnalyzer
from codeforge.application.interfaces.iprovider_gateway import IProviderGateway
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import PipelineCancelledError
from codeforge.application.services.naming import sanitize_identifier
from codeforge.domain.model_types import ArtifactKind, IntentLabel, PipelineStage
from codeforge.domain.models import ComponentSpec, GenerationRequest, IntentAnalysis
from codeforge.infrastructure.analysis.heuristic_intent_analyzer import (
    HeuristicIntentAnalyzer,
)

logger = logging.getLogger(__name__)

MAX_COMPONENTS = 8


class ComponentPayload(BaseModel):
    name: str = Field(min_length=1)
    kind: str = "component"
    purpose: str = ""
    responsibilities: List[str] = Field(default_factory=list)


class IntentPayload(BaseModel):
    """Shape the provider must return for an intent analysis."""

    label: IntentLabel
    confidence: float = Field(ge=0.0, le=1.0)
    entities: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    domain: str = "general"
    complexity: str = "standard"
    components: List[ComponentPayload] = Field(default_factory=list)

    @field_validator("label", mode="before")
    @classmethod
    def normalize_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class ProviderIntentAnalyzer(IIntentAnalyzer):
    """Asks the provider to classify the prompt and break it into components.

    Any provider failure or malformed reply falls back to the heuristic
    analyzer, so ``analyze`` only raises if the fallback does or the run is
    cancelled.
    """

    def __init__(
        self,
        gateway: IProviderGateway,
        fallback: Optional[IIntentAnalyzer] = None,
        max_tokens: int = 800,
    ):
        self.gateway = gateway
        self.fallback = fallback or HeuristicIntentAnalyzer()
        self.max_tokens = max_tokens

    def analyze(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IntentAnalysis:
        try:
            response = self.gateway.generate(
                self._build_prompt(request),
                self.max_tokens,
                0.0,
                cancel_token,
                stage=PipelineStage.PREPARE,
            )
            data = self._attempt_json_parse(response.text)
            if data is None:
                raise ValueError("Reply did not contain a JSON object")
            payload = IntentPayload.model_validate(data)
        except PipelineCancelledError:
            raise
        except (ValidationError, ValueError) as e:
            logger.warning(f"Provider intent reply rejected, using heuristic: {e}")
            return self.fallback.analyze(request)
        except Exception as e:
            logger.warning(f"Provider intent analysis failed, using heuristic: {e}")
            return self.fallback.analyze(request)

        return self._to_analysis(payload, request)

    @staticmethod
    def _build_prompt(request: GenerationRequest) -> str:
        labels = ", ".join(label.value for label in IntentLabel)
        kinds = ", ".join(kind.value for kind in ArtifactKind)
        return (
            "Classify the software request below. Respond with a single JSON "
            "object and nothing else, using these keys:\n"
            f'  "label": one of {labels}\n'
            '  "confidence": number between 0 and 1\n'
            '  "entities": list of UI or domain entity names\n'
            '  "features": list of short feature phrases\n'
            '  "domain": short domain name\n'
            '  "complexity": simple, standard or complex\n'
            '  "components": list of objects with "name" (PascalCase), '
            f'"kind" (one of {kinds}), "purpose" and "responsibilities"\n\n'
            f"Request: {request.prompt.strip()}"
        )

    @staticmethod
    def _attempt_json_parse(text: str) -> Optional[Dict[str, Any]]:
        """
        Attempt to parse JSON from the provider's response text.
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            matches = re.findall(r"```(?:json)?\s*([\s\S]*?)\s*```", text or "")
            if not matches:
                return None
            try:
                data = json.loads(matches[0])
            except json.JSONDecodeError:
                return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _to_analysis(payload: IntentPayload, request: GenerationRequest) -> IntentAnalysis:
        components = tuple(
            ComponentSpec(
                name=sanitize_identifier(c.name),
                kind=ArtifactKind.parse(c.kind, ArtifactKind.COMPONENT),
                purpose=c.purpose,
                responsibilities=tuple(r for r in c.responsibilities if r.strip()),
            )
            for c in payload.components[:MAX_COMPONENTS]
        )
        return IntentAnalysis(
            label=payload.label,
            confidence=payload.confidence,
            entities=tuple(payload.entities),
            features=tuple(payload.features),
            domain=str(request.context.get("domain") or payload.domain),
            complexity=str(request.context.get("complexity") or payload.complexity),
            components=components,
        )
