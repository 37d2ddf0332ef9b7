"""Built-in provider catalog and feature chains.

Text features run on free Groq-hosted models, so their cost ceiling is 0.0;
``deepseek/deepseek-chat`` is the paid emergency default.  Narration walks
the speech-synthesis providers in descending voice quality, ending with
the browser's own synthesizer.
"""

from __future__ import annotations

from tutor_router.adapters.outbound.routing_config import (
    FeatureSpec,
    ProviderSpec,
    RoutingDocument,
)
from tutor_router.domain.enums import ProviderCategory

_TEXT = ProviderCategory.TEXT_GENERATION
_TTS = ProviderCategory.SPEECH_SYNTHESIS

DEFAULT_PROVIDERS: list[ProviderSpec] = [
    # ── Text generation (Groq, free tier) ────────────────────
    ProviderSpec(
        id="deepseek-r1-distill-llama-70b",
        name="DeepSeek R1 Distill (Llama 70B)",
        vendor="groq",
        category=_TEXT,
        capacity_limit=8192,
        priority=1,
        strengths=["mathematical reasoning", "stem problem solving", "chain of thought"],
    ),
    ProviderSpec(
        id="llama-3.3-70b-versatile",
        name="Llama 3.3 70B Versatile",
        vendor="groq",
        category=_TEXT,
        capacity_limit=32768,
        priority=2,
        strengths=["general reasoning", "problem solving"],
    ),
    ProviderSpec(
        id="llama3-groq-70b-8192-tool-use-preview",
        name="Llama 3 Groq 70B Tool Use",
        vendor="groq",
        category=_TEXT,
        capacity_limit=8192,
        priority=1,
        strengths=["code generation", "function calling"],
    ),
    ProviderSpec(
        id="llama-3.1-70b-versatile",
        name="Llama 3.1 70B Versatile",
        vendor="groq",
        category=_TEXT,
        capacity_limit=131072,
        priority=3,
        strengths=["long context", "multi-step problems"],
    ),
    ProviderSpec(
        id="mixtral-8x7b-32768",
        name="Mixtral 8x7B",
        vendor="groq",
        category=_TEXT,
        capacity_limit=32768,
        priority=2,
        strengths=["creative writing", "multi-language support"],
    ),
    ProviderSpec(
        id="llama3-8b-8192",
        name="Llama 3 8B",
        vendor="groq",
        category=_TEXT,
        capacity_limit=8192,
        priority=4,
        strengths=["fast responses", "general purpose"],
    ),
    ProviderSpec(
        id="llama-3.2-1b-preview",
        name="Llama 3.2 1B Preview",
        vendor="groq",
        category=_TEXT,
        capacity_limit=8192,
        priority=10,
        strengths=["ultra-fast", "basic tasks"],
    ),
    # ── Translation ──────────────────────────────────────────
    ProviderSpec(
        id="gemma2-9b-it",
        name="Gemma 2 9B",
        vendor="groq",
        category=ProviderCategory.TRANSLATION,
        capacity_limit=8192,
        priority=1,
        strengths=["multilingual", "translation tasks"],
    ),
    # ── Emergency default ────────────────────────────────────
    ProviderSpec(
        id="deepseek/deepseek-chat",
        name="DeepSeek Chat",
        vendor="deepseek",
        category=_TEXT,
        unit_cost=0.00027,
        capacity_limit=65536,
        priority=20,
        strengths=["general purpose"],
    ),
    # ── Speech synthesis ─────────────────────────────────────
    ProviderSpec(
        id="elevenlabs",
        name="ElevenLabs",
        vendor="elevenlabs",
        category=_TTS,
        unit_cost=0.3,
        capacity_limit=5000,
        priority=1,
        strengths=["natural voices", "expressive narration"],
    ),
    ProviderSpec(
        id="openai-tts",
        name="OpenAI TTS",
        vendor="openai",
        category=_TTS,
        unit_cost=0.015,
        capacity_limit=4096,
        priority=2,
    ),
    ProviderSpec(
        id="azure-tts",
        name="Azure Neural TTS",
        vendor="azure",
        category=_TTS,
        unit_cost=0.016,
        capacity_limit=10000,
        priority=3,
    ),
    ProviderSpec(
        id="browser-tts",
        name="Browser Speech Synthesis",
        vendor="browser",
        category=_TTS,
        priority=9,
        strengths=["always available"],
    ),
]

DEFAULT_FEATURES: dict[str, FeatureSpec] = {
    "coding_academy": FeatureSpec(
        primary="llama3-groq-70b-8192-tool-use-preview",
        fallbacks=["llama-3.3-70b-versatile", "llama-3.1-70b-versatile", "llama3-8b-8192"],
        cost_ceiling=0.0,
        category=_TEXT,
    ),
    "ai_academy": FeatureSpec(
        primary="deepseek-r1-distill-llama-70b",
        fallbacks=["llama-3.3-70b-versatile", "llama-3.1-70b-versatile", "mixtral-8x7b-32768"],
        cost_ceiling=0.0,
        category=_TEXT,
    ),
    "creative_studio": FeatureSpec(
        primary="mixtral-8x7b-32768",
        fallbacks=["llama-3.3-70b-versatile", "llama-3.1-70b-versatile", "llama3-8b-8192"],
        cost_ceiling=0.0,
        category=_TEXT,
    ),
    "translator": FeatureSpec(
        primary="gemma2-9b-it",
        fallbacks=["llama-3.3-70b-versatile", "mixtral-8x7b-32768", "llama3-8b-8192"],
        cost_ceiling=0.0,
        category=ProviderCategory.TRANSLATION,
    ),
    "robotics": FeatureSpec(
        primary="deepseek-r1-distill-llama-70b",
        fallbacks=[
            "llama3-groq-70b-8192-tool-use-preview",
            "llama-3.3-70b-versatile",
            "llama-3.1-70b-versatile",
        ],
        cost_ceiling=0.0,
        category=_TEXT,
    ),
    "grammar_checker": FeatureSpec(
        primary="llama-3.3-70b-versatile",
        fallbacks=["mixtral-8x7b-32768", "gemma2-9b-it", "llama3-8b-8192"],
        cost_ceiling=0.0,
        category=_TEXT,
    ),
    "general_chat": FeatureSpec(
        primary="deepseek-r1-distill-llama-70b",
        fallbacks=["llama-3.3-70b-versatile", "llama-3.1-70b-versatile", "mixtral-8x7b-32768"],
        cost_ceiling=0.0,
        category=_TEXT,
    ),
    "narration": FeatureSpec(
        primary="elevenlabs",
        fallbacks=["openai-tts", "azure-tts", "browser-tts"],
        max_retries=4,
        category=_TTS,
    ),
}

DEFAULT_ROUTING_DOCUMENT = RoutingDocument(
    providers=DEFAULT_PROVIDERS,
    features=DEFAULT_FEATURES,
)
