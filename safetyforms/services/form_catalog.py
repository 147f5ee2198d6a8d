"""
COR form catalogue.

Bundled form configurations live as one JSON document per form under
``safetyforms/form_configs/`` (override with the FORM_CONFIGS_DIR config).
A file may hold a single configuration object or a list of them.

The helpers below answer the questions the seeding command and the admin
screens ask: which forms exist for a COR element, which are mandatory,
how many there are per element.
"""

import json
import logging
from pathlib import Path

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

_DEFAULT_DIR = Path(__file__).resolve().parent.parent / "form_configs"

COR_ELEMENT_DESCRIPTIONS = {
    2: "Hazard Identification & Assessment",
    3: "Hazard Control",
    4: "Competency & Training",
    5: "Workplace Behavior",
    6: "Personal Protective Equipment",
    7: "Maintenance",
    8: "Training & Communication",
    9: "Workplace Inspections",
    10: "Incident Investigation",
    11: "Emergency Preparedness",
    12: "Statistics & Records",
    13: "Regulatory Awareness",
    14: "Management System",
}


def _configs_dir(directory=None) -> Path:
    if directory:
        return Path(directory)
    if has_app_context() and current_app.config.get("FORM_CONFIGS_DIR"):
        return Path(current_app.config["FORM_CONFIGS_DIR"])
    return _DEFAULT_DIR


def load_form_configs(directory=None) -> list[dict]:
    """Read every ``*.json`` form configuration in ``directory`` (sorted by file name).

    Raises:
        FileNotFoundError: If the directory does not exist.
        ValueError: If a file is not valid JSON or holds something other
            than a configuration object or a list of them.
    """
    path = _configs_dir(directory)
    if not path.is_dir():
        raise FileNotFoundError(f"Form configuration directory not found: {path}")

    configs: list[dict] = []
    for file in sorted(path.glob("*.json")):
        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid form configuration file {file.name}: {exc}") from exc

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                raise ValueError(f"Invalid form configuration file {file.name}: expected an object")
            configs.append(item)

    logger.debug("Loaded %s form configurations from %s", len(configs), path)
    return configs


def configs_by_element(configs=None) -> dict[int, list[dict]]:
    """Group configurations by COR element (every element 2–14 is present)."""
    configs = load_form_configs() if configs is None else configs
    grouped: dict[int, list[dict]] = {element: [] for element in COR_ELEMENT_DESCRIPTIONS}
    for config in configs:
        grouped.setdefault(config.get("cor_element"), []).append(config)
    return grouped


def get_forms_for_element(element: int, configs=None) -> list[dict]:
    return configs_by_element(configs).get(element, [])


def get_form_by_code(code: str, configs=None) -> dict | None:
    configs = load_form_configs() if configs is None else configs
    return next((c for c in configs if c.get("code") == code), None)


def get_forms_by_frequency(frequency: str, configs=None) -> list[dict]:
    configs = load_form_configs() if configs is None else configs
    return [c for c in configs if c.get("frequency") == frequency]


def get_mandatory_forms(configs=None) -> list[dict]:
    configs = load_form_configs() if configs is None else configs
    return [c for c in configs if c.get("is_mandatory")]


def form_count_summary(configs=None) -> dict:
    """Totals for the catalogue: overall, per COR element, mandatory vs optional."""
    configs = load_form_configs() if configs is None else configs
    mandatory = sum(1 for c in configs if c.get("is_mandatory"))
    return {
        "total": len(configs),
        "by_element": {element: len(forms) for element, forms in configs_by_element(configs).items()},
        "mandatory": mandatory,
        "optional": len(configs) - mandatory,
    }
