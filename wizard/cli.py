"""Terminal front-end for the project wizard.

Renders orchestrator state with questionary prompts and forwards answers as
intents. Holds no state of its own. Every prompt returning None means the
user cancelled (Ctrl+C / Esc).
"""

import asyncio

import questionary
from questionary import Choice

from wizard.catalog import (
    AGENT_TYPES,
    DATA_SOURCES,
    OUTPUT_FORMATS,
    SPORTS,
    TOOLS,
    DataSourceId,
    OutputFormatId,
    enabled_output_formats,
    enabled_tools,
)
from wizard.credentials import GateState
from wizard.errors import ValidationError, WizardError
from wizard.events import Notice
from wizard.orchestrator import Phase, ProjectWizardOrchestrator
from wizard.ui import STYLE

_SUBMIT = "__submit__"
_CANCEL = "__cancel__"
_CREATE = "__create__"
_DONE = "__done__"


def print_notice(notice: Notice) -> None:
    symbol = "✗" if notice.destructive else "✓"
    line = f"  {symbol} {notice.title}"
    if notice.description:
        line += f": {notice.description}"
    print(line)


def _source_label(orch: ProjectWizardOrchestrator, source: DataSourceId) -> str:
    info = DATA_SOURCES[source]
    selected = source in orch.config.data_sources
    mark = "[x]" if selected else "[ ]"
    label = f"{mark} {info.name}"
    if info.requires_credential:
        state = orch.gate_state(source)
        label += " (Connected)" if state is GateState.CONNECTED else " (API key required)"
    sports = orch.config.sports_for(source)
    if selected and orch.config.is_unlocked(source):
        if sports:
            label += ": " + ", ".join(SPORTS[s].name for s in sports)
        else:
            label += ": no sports selected"
    return label


def _ask_name(orch: ProjectWizardOrchestrator) -> bool:
    while True:
        name = questionary.text("Project name:", default=orch.config.name, style=STYLE).ask()
        if name is None:
            return False
        error = orch.set_name(name).error_for("project_name")
        if error is None:
            return True
        print(f"{error}. Try again.\n")


def _choose_sports(orch: ProjectWizardOrchestrator, source: DataSourceId) -> None:
    dialog = orch.open_sport_dialog(source)
    picked = questionary.checkbox(
        f"Select sports for {DATA_SOURCES[source].name}:",
        choices=[
            Choice(f"{info.emoji} {info.name}", sid, checked=sid in dialog.selection)
            for sid, info in SPORTS.items()
        ],
        style=STYLE,
    ).ask()
    if picked is None:
        orch.close_sport_dialog()
        return
    for sport in SPORTS:
        if (sport in picked) != (sport in dialog.selection):
            orch.toggle_temp_sport(sport)
    try:
        orch.confirm_sport_selection()
    except ValidationError as e:
        print(f"{e}.\n")
        orch.close_sport_dialog()


def _connect(orch: ProjectWizardOrchestrator, source: DataSourceId, default_key: str) -> None:
    name = DATA_SOURCES[source].name
    key = questionary.password(f"{name} API key:", default=default_key, style=STYLE).ask()
    if key is None:
        return
    print(f"\nVerifying {name}...")
    asyncio.run(orch.submit_credential(source, key))


def run_project_step(orch: ProjectWizardOrchestrator, default_keys: dict[str, str] | None = None) -> bool:
    """Collect the project configuration. Returns False if user cancelled."""
    keys = default_keys or {}
    print("\nCreate New Project\n")
    if not _ask_name(orch):
        return False

    while orch.phase is Phase.CONFIGURING:
        validation = orch.validation
        if orch.sync_error:
            print(f"\nLast sync failed: {orch.sync_error}")
        if validation.errors:
            print("\n" + "\n".join(f"  ! {m}" for m in validation.errors.values()))

        choices: list[Choice] = []
        for source in DATA_SOURCES:
            choices.append(Choice(_source_label(orch, source), ("source", source)))
        choices.append(
            Choice(
                "Create Project",
                _SUBMIT,
                disabled=None if orch.can_submit_project else "select sports first",
            )
        )
        choices.append(Choice("Cancel", _CANCEL))

        action = questionary.select("Configure data sources:", choices=choices, style=STYLE).ask()
        if action is None or action == _CANCEL:
            return False
        if action == _SUBMIT:
            try:
                asyncio.run(orch.submit_project())
            except ValidationError as e:
                print(f"{e}.\n")
            continue

        _, source = action
        _source_action(orch, source, keys.get(source.value, ""))
    return True


def _source_action(orch: ProjectWizardOrchestrator, source: DataSourceId, default_key: str) -> None:
    config = orch.config
    if not config.is_unlocked(source):
        _connect(orch, source, default_key)
        return
    if source not in config.data_sources:
        changed = orch.toggle_data_source(source)
        if changed:
            _choose_sports(orch, source)
        return
    what = questionary.select(
        f"{DATA_SOURCES[source].name}:",
        choices=[
            Choice("Select sports", "sports"),
            Choice("Remove data source", "remove"),
            Choice("Back", "back"),
        ],
        style=STYLE,
    ).ask()
    if what == "sports":
        _choose_sports(orch, source)
    elif what == "remove" and not orch.toggle_data_source(source):
        print("At least one data source is required.\n")


def _step_header(orch: ProjectWizardOrchestrator) -> None:
    steps = orch.agent_steps
    if steps is not None:
        print(f"\nStep {steps.step} of {steps.total}: {steps.label}")


def _create_agent(orch: ProjectWizardOrchestrator) -> None:
    orch.start_agent_creation()
    usable_tools = enabled_tools()
    usable_formats = enabled_output_formats()

    _step_header(orch)
    agent_type = questionary.select(
        "Agent type:",
        choices=[Choice(f"{i.name}: {i.description}", t) for t, i in AGENT_TYPES.items()],
        style=STYLE,
    ).ask()
    if agent_type is None:
        orch.cancel_agent_creation()
        return
    orch.set_agent_type(agent_type)
    orch.next_agent_step()

    _step_header(orch)
    tools = questionary.checkbox(
        "Tools:",
        choices=[
            Choice(i.label, t, disabled=None if t in usable_tools else "Coming Soon")
            for t, i in TOOLS.items()
        ],
        style=STYLE,
    ).ask()
    if tools is None:
        orch.cancel_agent_creation()
        return
    for tool in tools:
        orch.toggle_agent_tool(tool)
    orch.next_agent_step()

    _step_header(orch)
    fmt = questionary.select(
        "Output format:",
        choices=[
            Choice(i.label, f, disabled=None if f in usable_formats else "Coming Soon")
            for f, i in OUTPUT_FORMATS.items()
        ],
        style=STYLE,
    ).ask()
    if fmt is None:
        orch.cancel_agent_creation()
        return
    orch.set_agent_output_format(fmt)
    if fmt is OutputFormatId.JSON:
        schema = questionary.text(
            "JSON schema:", default=orch.agent_draft.json_schema or "", multiline=True, style=STYLE
        ).ask()
        if schema is None:
            orch.cancel_agent_creation()
            return
        orch.set_agent_json_schema(schema)

    try:
        orch.commit_agent()
    except ValidationError as e:
        print(f"{e}.\n")
        orch.cancel_agent_creation()


def run_agent_step(orch: ProjectWizardOrchestrator) -> bool:
    """Agent dashboard loop. Returns False if user cancelled."""
    project = orch.project
    print(f"\nProject Dashboard: {project.name}")
    print("  Data sources: " + ", ".join(DATA_SOURCES[s].name for s in project.data_sources))
    print("  Sports: " + ", ".join(f"{SPORTS[s].emoji} {SPORTS[s].name}" for s in project.all_sports()))

    while True:
        choices = [Choice("Create New Agent", _CREATE)]
        for agent in orch.agents:
            status = "active" if agent.active else "inactive"
            choices.append(
                Choice(f"{agent.id}: {agent.display_name} [{agent.output_format.value.upper()}] ({status})", agent.id)
            )
        choices.append(Choice("Done", _DONE))

        action = questionary.select("Agents:", choices=choices, style=STYLE).ask()
        if action is None:
            return False
        if action == _DONE:
            return True
        if action == _CREATE:
            _create_agent(orch)
            continue

        what = questionary.select(
            f"{action}:",
            choices=[Choice("Toggle active", "toggle"), Choice("Delete", "delete"), Choice("Back", "back")],
            style=STYLE,
        ).ask()
        if what == "toggle":
            orch.toggle_agent_active(action)
        elif what == "delete":
            orch.delete_agent(action)


def run_wizard(orch: ProjectWizardOrchestrator, default_keys: dict[str, str] | None = None) -> bool:
    """Run project creation then the agent dashboard. Returns False if cancelled."""
    orch.notices.subscribe("*", print_notice)
    try:
        if not run_project_step(orch, default_keys):
            return False
        return run_agent_step(orch)
    except WizardError as e:
        print(f"\n{e}")
        return False
