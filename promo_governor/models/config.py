"""Run configuration injected by the CLI / API layer."""

from promo_governor.models.base import DocumentModel


class PathsConfig(DocumentModel):
    data_dir: str = "site/src/data"


class GuardrailsConfig(DocumentModel):
    max_data_patches_per_run: int = 5


class BudgetConfig(DocumentModel):
    tier: str = "200"  # Which minute-budget tier the allocator reads


class KitConfig(DocumentModel):
    """Configuration for one kit checkout (kit.config.json)."""

    kit_version: int = 1
    paths: PathsConfig = PathsConfig()
    guardrails: GuardrailsConfig = GuardrailsConfig()
    budget: BudgetConfig = BudgetConfig()


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base; non-dict values replace."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
