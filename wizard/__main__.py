"""Entry point: python -m wizard (or the machina-wizard script)."""

import os
import sys
from pathlib import Path

from dotenv import dotenv_values

from core.logging_config import setup_logging
from core.settings import get_setting, load_settings
from wizard.catalog import DATA_SOURCES
from wizard.cli import run_wizard
from wizard.orchestrator import create_orchestrator

WIZARD_DONE = 0
WIZARD_QUIT = 1


def _default_keys(settings: dict, env_path: Path) -> dict[str, str]:
    """API keys from .env or the environment, keyed by data source id."""
    env = dict(dotenv_values(env_path)) if env_path.exists() else {}
    keys: dict[str, str] = {}
    for sid, info in DATA_SOURCES.items():
        var = get_setting(settings, f"data_sources.{sid.value}.api_key_env")
        if not info.requires_credential or not var:
            continue
        value = env.get(var) or os.environ.get(var)
        if value:
            keys[sid.value] = value
    return keys


def main() -> int:
    project_root = Path.cwd()
    settings = load_settings(project_root / "config")
    setup_logging(project_root, settings)
    orch = create_orchestrator(settings)

    try:
        if run_wizard(orch, _default_keys(settings, project_root / ".env")):
            print("\nAll set.\n")
            return WIZARD_DONE
        print("\nWizard cancelled.")
        return WIZARD_QUIT
    except KeyboardInterrupt:
        print("\n\nWizard cancelled.")
        return WIZARD_QUIT


if __name__ == "__main__":
    sys.exit(main())
