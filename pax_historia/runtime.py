"""Process-wide collaborators, built once at startup and shared by the routes."""

from dataclasses import dataclass

from pax_historia import storage
from pax_historia.advisor import Advisor
from pax_historia.broadcast import Broadcaster
from pax_historia.config import Settings
from pax_historia.diplomacy import DiplomacyManager
from pax_historia.engine import TurnEngine
from pax_historia.generation import GenerationClient
from pax_historia.llm import LLM, HttpLLM
from pax_historia.registry import NationRegistry


@dataclass
class Runtime:
    settings: Settings
    registry: NationRegistry
    generation: GenerationClient
    turns: TurnEngine
    diplomacy: DiplomacyManager
    advisor: Advisor
    broadcaster: Broadcaster


def build_llm(settings: Settings) -> HttpLLM:
    return HttpLLM(
        provider_url=settings.llm_api_url,
        api_key=settings.llm_api_key,
        provider_format="koboldcpp" if settings.llm_provider_format == "koboldcpp" else "openai",
        model=settings.llm_model,
        timeout=settings.llm_timeout,
    )


def build_runtime(settings: Settings, llm: LLM | None = None) -> Runtime:
    """Wire every collaborator. Storage must already be initialised."""
    registry = NationRegistry.from_presets(settings.presets_dir)
    generation = GenerationClient(
        llm or build_llm(settings),
        debug_dir=settings.debug_dir or storage.debug_dir(),
    )
    return Runtime(
        settings=settings,
        registry=registry,
        generation=generation,
        turns=TurnEngine(registry, generation),
        diplomacy=DiplomacyManager(registry, generation),
        advisor=Advisor(registry, generation),
        broadcaster=Broadcaster(),
    )
