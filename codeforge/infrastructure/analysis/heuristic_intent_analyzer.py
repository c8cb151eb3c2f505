"""Keyword-based intent classification that never calls a provider."""

import logging
import re
from typing import Dict, List, Optional, Tuple

from codeforge.application.interfaces.iintent_analyzer import IIntentAnalyzer
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.naming import words
from codeforge.domain.model_types import IntentLabel
from codeforge.domain.models import GenerationRequest, IntentAnalysis

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.6
CONFIDENCE_STEP = 0.1
MAX_CONFIDENCE = 0.95
MAX_FEATURES = 8

# Checked in this order; the first label wins a tie.
INTENT_KEYWORDS: List[Tuple[IntentLabel, Tuple[str, ...]]] = [
    (
        IntentLabel.CREATE_API,
        ("api", "endpoint", "endpoints", "route", "routes", "rest", "graphql",
         "handler", "controller", "crud"),
    ),
    (
        IntentLabel.CREATE_SERVICE,
        ("service", "client", "integration", "worker", "job", "queue", "sdk",
         "fetcher", "scheduler"),
    ),
    (
        IntentLabel.CREATE_MODEL,
        ("model", "schema", "entity", "entities", "type", "types", "interface",
         "dto", "table"),
    ),
    (
        IntentLabel.CREATE_PAGE,
        ("page", "screen", "view", "dashboard", "landing", "layout"),
    ),
    (
        IntentLabel.CREATE_COMPONENT,
        ("component", "widget", "button", "form", "modal", "dialog", "card",
         "list", "navbar", "sidebar", "header", "footer", "input", "dropdown",
         "tooltip", "carousel", "tabs", "accordion", "pagination"),
    ),
    (
        IntentLabel.CREATE_APP,
        ("app", "application", "website", "site", "platform", "system", "project"),
    ),
]

# UI entities recognised in prompts, mapped to component names.
ENTITY_KEYWORDS: Dict[str, str] = {
    "button": "Button", "card": "Card", "modal": "Modal", "dialog": "Dialog",
    "form": "Form", "list": "List", "table": "Table", "menu": "Menu",
    "navbar": "Navbar", "sidebar": "Sidebar", "footer": "Footer",
    "header": "Header", "input": "Input", "textarea": "Textarea",
    "select": "Select", "checkbox": "Checkbox", "toggle": "Toggle",
    "slider": "Slider", "dropdown": "Dropdown", "tooltip": "Tooltip",
    "alert": "Alert", "notification": "Notification", "badge": "Badge",
    "avatar": "Avatar", "spinner": "Spinner", "progress": "Progress",
    "tabs": "Tabs", "accordion": "Accordion", "carousel": "Carousel",
    "pagination": "Pagination", "breadcrumb": "Breadcrumb",
}

DOMAIN_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "e-commerce": ("shop", "store", "cart", "checkout", "product", "products", "order"),
    "finance": ("invoice", "payment", "budget", "expense", "bank", "wallet"),
    "productivity": ("todo", "task", "tasks", "note", "notes", "calendar", "kanban"),
    "social": ("chat", "message", "feed", "post", "comment", "profile"),
    "education": ("course", "quiz", "lesson", "student"),
    "health": ("patient", "appointment", "fitness", "workout"),
}

FEATURE_CLAUSE = re.compile(r"\b(?:with|that|which|including|supports?)\b(.+)", re.I)
FEATURE_SPLIT = re.compile(r",|\band\b|\bplus\b|;", re.I)


class HeuristicIntentAnalyzer(IIntentAnalyzer):
    """Classifies prompts by keyword counts.

    With no keyword hits the label defaults to CREATE_APP at the base
    confidence. Each extra hit for the winning label raises the confidence by
    one step, up to a ceiling.
    """

    def analyze(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IntentAnalysis:
        prompt = request.prompt or ""
        tokens = words(prompt)

        label, hits = self._classify(tokens)
        confidence = min(
            MAX_CONFIDENCE, BASE_CONFIDENCE + CONFIDENCE_STEP * max(0, hits - 1)
        )
        features = self._features(prompt)
        entities = self._entities(tokens)

        analysis = IntentAnalysis(
            label=label,
            confidence=round(confidence, 2),
            entities=tuple(entities),
            features=tuple(features),
            domain=str(request.context.get("domain") or self._domain(tokens)),
            complexity=str(
                request.context.get("complexity") or self._complexity(features)
            ),
        )
        logger.debug(
            f"Heuristic intent {analysis.label.value} ({analysis.confidence}) "
            f"entities={list(analysis.entities)}"
        )
        return analysis

    @staticmethod
    def _classify(tokens: List[str]) -> Tuple[IntentLabel, int]:
        best_label, best_hits = IntentLabel.CREATE_APP, 0
        for label, keywords in INTENT_KEYWORDS:
            hits = sum(1 for t in tokens if t in keywords)
            if hits > best_hits:
                best_label, best_hits = label, hits
        return best_label, best_hits

    @staticmethod
    def _entities(tokens: List[str]) -> List[str]:
        entities: List[str] = []
        for token in tokens:
            entity = ENTITY_KEYWORDS.get(token)
            if entity and entity not in entities:
                entities.append(entity)
        return entities

    @staticmethod
    def _features(prompt: str) -> List[str]:
        match = FEATURE_CLAUSE.search(prompt)
        if not match:
            return []
        features = []
        for part in FEATURE_SPLIT.split(match.group(1)):
            cleaned = " ".join(part.strip(" .!?").split()[:6])
            if cleaned and cleaned.lower() not in (f.lower() for f in features):
                features.append(cleaned)
        return features[:MAX_FEATURES]

    @staticmethod
    def _domain(tokens: List[str]) -> str:
        for domain, keywords in DOMAIN_KEYWORDS.items():
            if any(t in keywords for t in tokens):
                return domain
        return "general"

    @staticmethod
    def _complexity(features: List[str]) -> str:
        if len(features) <= 2:
            return "simple"
        if len(features) <= 5:
            return "standard"
        return "complex"
