"""Model selection for the on-prem and cloud paths."""

from loguru import logger

from compliance_router.catalog import CloudCatalog
from compliance_router.heuristics import classify
from compliance_router.models import CloudModel, OnPremModel, TaskCategory
from compliance_router.onprem import OnPremAvailability

CODE_CATEGORIES = frozenset({TaskCategory.CODE, TaskCategory.TEST, TaskCategory.DEPLOY})

# Substrings that mark a code-specialist model id. A ranking heuristic only:
# presets with a "code" capability tag are preferred over a name match.
CODE_MODEL_MARKERS: tuple[str, ...] = ("coder", "code", "deepseek")

# Category → preferred cloud provider. Categories not listed use the
# catalog's recommended model.
CLOUD_PROVIDER_BY_CATEGORY: dict[TaskCategory, str] = {
    TaskCategory.CODE: "Anthropic",      # reasoning-oriented
    TaskCategory.TEST: "Anthropic",
    TaskCategory.RESEARCH: "Google",     # large / real-time context
    TaskCategory.DESIGN: "OpenAI",       # fluent writing
    TaskCategory.DOCUMENT: "OpenAI",
}


def _code_rank(model: OnPremModel) -> int:
    if "code" in model.capabilities:
        return 0
    model_id = model.model_id.lower()
    if any(marker in model_id for marker in CODE_MODEL_MARKERS):
        return 1
    return 2


class ModelSelector:
    """Chooses a concrete model once the router knows where to send a task."""

    def __init__(self, availability: OnPremAvailability, catalog: CloudCatalog | None = None):
        self._availability = availability
        self._catalog = catalog or CloudCatalog()

    @property
    def catalog(self) -> CloudCatalog:
        return self._catalog

    async def select_on_prem_model(self, task: str) -> OnPremModel | None:
        """Pick the best reachable on-prem model, or None if none are reachable."""
        available = await self._availability.get_available_models()
        if not available:
            return None

        if classify(task) in CODE_CATEGORIES:
            # min() is stable: ties keep discovery order.
            best = min(available, key=_code_rank)
            if _code_rank(best) < 2:
                return best

        return available[0]

    def select_cloud_model(self, task: str, preferred_id: str | None = None) -> CloudModel:
        """Pick a cloud model. A known ``preferred_id`` always wins."""
        if preferred_id:
            preferred = self._catalog.resolve(preferred_id)
            if preferred:
                return preferred
            suggestions = self._catalog.suggest(preferred_id)
            hint = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
            logger.warning(f"Unknown preferred cloud model '{preferred_id}', routing by task.{hint}")

        provider = CLOUD_PROVIDER_BY_CATEGORY.get(classify(task))
        if provider:
            return self._catalog.first(provider)
        return self._catalog.recommended()
