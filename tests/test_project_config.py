"""Tests for wizard.project: data source rules, sport selections, validation."""

import random

import pytest
from pydantic import ValidationError as PydanticValidationError

from wizard.catalog import SPORTS, DataSourceId, SportId
from wizard.credentials import CredentialGate, GateState, SimulatedCredentialVerifier
from wizard.errors import ValidationError
from wizard.project import DATA_SOURCES_FIELD, NAME_FIELD, Project, ProjectConfigState

CORE = DataSourceId.MACHINA_CORE
RADAR = DataSourceId.SPORTRADAR


def _gates(connected: bool = False) -> dict[DataSourceId, CredentialGate]:
    gate = CredentialGate(RADAR, SimulatedCredentialVerifier(0))
    if connected:
        gate.resolve(gate.begin("abc123"), True, "connected")
        assert gate.state is GateState.CONNECTED
    return {RADAR: gate}


@pytest.fixture
def state() -> ProjectConfigState:
    return ProjectConfigState(_gates())


@pytest.fixture
def connected_state() -> ProjectConfigState:
    return ProjectConfigState(_gates(connected=True))


class TestName:
    def test_name_is_trimmed(self, state: ProjectConfigState) -> None:
        state.set_name("  Derby Day  ")
        assert state.name == "Derby Day"
        assert state.validate().error_for(NAME_FIELD) is None

    def test_blank_name_is_invalid(self, state: ProjectConfigState) -> None:
        state.set_name("   ")
        assert state.name == ""
        assert state.validate().error_for(NAME_FIELD) == "Project name is required"

    def test_min_name_length_from_config(self) -> None:
        state = ProjectConfigState(_gates(), min_name_length=3)
        state.set_name("ab")
        assert "at least 3" in state.validate().error_for(NAME_FIELD)
        state.set_name("abc")
        assert state.validate().error_for(NAME_FIELD) is None


class TestDataSources:
    def test_default_source_selected_initially(self, state: ProjectConfigState) -> None:
        assert state.data_sources == [CORE]

    def test_last_default_source_cannot_be_removed(self, state: ProjectConfigState) -> None:
        state.set_sport_selection(CORE, [SportId.SOCCER])
        assert state.toggle_data_source(CORE) is False
        assert state.data_sources == [CORE]
        assert state.sports_for(CORE) == [SportId.SOCCER]

    def test_locked_source_toggle_is_noop(self, state: ProjectConfigState) -> None:
        assert state.toggle_data_source(RADAR) is False
        assert state.add_data_source(RADAR) is False
        assert state.data_sources == [CORE]

    def test_locked_source_cannot_get_sports(self, state: ProjectConfigState) -> None:
        with pytest.raises(ValidationError):
            state.set_sport_selection(RADAR, [SportId.SOCCER])
        with pytest.raises(ValidationError):
            state.open_sport_dialog(RADAR)

    def test_connected_source_can_be_toggled(self, connected_state: ProjectConfigState) -> None:
        assert connected_state.toggle_data_source(RADAR) is True
        assert connected_state.data_sources == [CORE, RADAR]

    def test_removal_prunes_sport_selection(self, connected_state: ProjectConfigState) -> None:
        connected_state.toggle_data_source(RADAR)
        connected_state.set_sport_selection(RADAR, [SportId.MMA])
        connected_state.toggle_data_source(RADAR)
        assert RADAR not in connected_state.snapshot().sport_selections
        assert connected_state.sports_for(RADAR) == []

    def test_removing_last_non_default_source_substitutes_default(
        self, connected_state: ProjectConfigState
    ) -> None:
        connected_state.toggle_data_source(RADAR)
        connected_state.set_sport_selection(CORE, [SportId.SOCCER])
        assert connected_state.toggle_data_source(CORE) is True
        assert connected_state.data_sources == [RADAR]
        assert connected_state.toggle_data_source(RADAR) is True
        assert connected_state.data_sources == [CORE]
        assert connected_state.snapshot().sport_selections == {}

    def test_default_source_must_not_require_credential(self) -> None:
        with pytest.raises(ValueError):
            ProjectConfigState(_gates(), default_source=RADAR)

    @pytest.mark.parametrize("seed", range(25))
    def test_random_toggles_never_empty_and_never_orphan(self, seed: int) -> None:
        rng = random.Random(seed)
        gates = _gates(connected=seed % 2 == 0)
        state = ProjectConfigState(gates)
        for _ in range(60):
            source = rng.choice([CORE, RADAR])
            if rng.random() < 0.3 and state.is_unlocked(source) and source in state.data_sources:
                state.set_sport_selection(source, rng.sample(list(SPORTS), 2))
            else:
                state.toggle_data_source(source)
            assert state.data_sources
            project = state.snapshot()
            assert set(project.sport_selections) <= set(project.data_sources)


class TestSports:
    def test_set_sport_selection_requires_selected_source(
        self, connected_state: ProjectConfigState
    ) -> None:
        with pytest.raises(ValidationError, match="not selected"):
            connected_state.set_sport_selection(RADAR, [SportId.SOCCER])

    def test_set_sport_selection_dedupes_in_order(self, state: ProjectConfigState) -> None:
        state.set_sport_selection(CORE, [SportId.MMA, SportId.SOCCER, SportId.MMA])
        assert state.sports_for(CORE) == [SportId.MMA, SportId.SOCCER]

    def test_remove_sport(self, state: ProjectConfigState) -> None:
        state.set_sport_selection(CORE, [SportId.MMA, SportId.SOCCER])
        state.remove_sport(CORE, SportId.MMA)
        assert state.sports_for(CORE) == [SportId.SOCCER]

    def test_dialog_is_a_buffer_until_confirmed(self, state: ProjectConfigState) -> None:
        state.set_sport_selection(CORE, [SportId.SOCCER])
        dialog = state.open_sport_dialog(CORE)
        dialog.toggle(SportId.HOCKEY)
        assert state.sports_for(CORE) == [SportId.SOCCER]
        state.confirm_sport_dialog(dialog)
        assert state.sports_for(CORE) == [SportId.SOCCER, SportId.HOCKEY]

    def test_confirm_empty_dialog_is_rejected(self, state: ProjectConfigState) -> None:
        state.set_sport_selection(CORE, [SportId.SOCCER])
        dialog = state.open_sport_dialog(CORE)
        dialog.toggle(SportId.SOCCER)
        with pytest.raises(ValidationError):
            state.confirm_sport_dialog(dialog)
        assert state.sports_for(CORE) == [SportId.SOCCER]

    def test_dialog_select_all_pairs(self, state: ProjectConfigState) -> None:
        dialog = state.open_sport_dialog(CORE)
        dialog.select_all()
        assert dialog.is_all_selected
        dialog.select_all()
        assert len(dialog.selection) == 0

    def test_dialog_search_matches_name_or_id(self, state: ProjectConfigState) -> None:
        dialog = state.open_sport_dialog(CORE)
        assert dialog.search("BALL") == [
            SportId.FOOTBALL,
            SportId.SOCCER,
            SportId.BASKETBALL,
            SportId.BASEBALL,
            SportId.VOLLEYBALL,
            SportId.HANDBALL,
        ]
        assert dialog.search("formula1") == [SportId.FORMULA1]
        assert dialog.search("") == list(SPORTS)


class TestValidate:
    def test_selected_unlocked_source_without_sports_is_an_error(
        self, state: ProjectConfigState
    ) -> None:
        state.set_name("Derby")
        result = state.validate()
        assert DATA_SOURCES_FIELD in result.errors
        assert "Machina Core" in result.errors[DATA_SOURCES_FIELD]
        assert state.can_submit() is False

    def test_validate_is_idempotent(self, state: ProjectConfigState) -> None:
        assert state.validate() == state.validate()
        state.set_sport_selection(CORE, [SportId.SOCCER])
        assert state.validate() == state.validate()

    def test_validation_follows_edits(self, connected_state: ProjectConfigState) -> None:
        connected_state.set_name("Derby")
        connected_state.set_sport_selection(CORE, [SportId.SOCCER])
        assert connected_state.validate().ok
        connected_state.toggle_data_source(RADAR)
        assert "Sportradar" in connected_state.validate().errors[DATA_SOURCES_FIELD]
        connected_state.set_sport_selection(RADAR, [SportId.RUGBY])
        assert connected_state.validate().ok
        connected_state.remove_sport(RADAR, SportId.RUGBY)
        assert not connected_state.validate().ok

    def test_has_sports_somewhere_but_one_source_empty_blocks_submit(
        self, connected_state: ProjectConfigState
    ) -> None:
        # Live validation and the submit guard agree on the stricter rule.
        connected_state.set_name("Derby")
        connected_state.set_sport_selection(CORE, [SportId.SOCCER])
        connected_state.toggle_data_source(RADAR)
        assert connected_state.has_any_sport() is True
        assert connected_state.can_submit() is False

    def test_valid_configuration_can_submit(self, state: ProjectConfigState) -> None:
        state.set_name("Derby")
        state.set_sport_selection(CORE, [SportId.SOCCER])
        assert state.validate().ok
        assert state.can_submit() is True


class TestProjectSnapshot:
    def test_snapshot_contents(self, state: ProjectConfigState) -> None:
        state.set_name("Derby")
        state.set_sport_selection(CORE, [SportId.SOCCER, SportId.MMA])
        project = state.snapshot()
        assert project.name == "Derby"
        assert project.data_sources == (CORE,)
        assert project.sport_selections == {CORE: (SportId.SOCCER, SportId.MMA)}
        assert project.all_sports() == [SportId.SOCCER, SportId.MMA]

    def test_snapshot_is_frozen(self, state: ProjectConfigState) -> None:
        project = state.snapshot()
        with pytest.raises(PydanticValidationError):
            project.name = "other"

    def test_model_rejects_empty_sources(self) -> None:
        with pytest.raises(PydanticValidationError):
            Project(name="x", data_sources=(), sport_selections={})

    def test_model_rejects_orphan_selections(self) -> None:
        with pytest.raises(PydanticValidationError):
            Project(
                name="x",
                data_sources=(CORE,),
                sport_selections={RADAR: (SportId.SOCCER,)},
            )

    def test_all_sports_is_union(self) -> None:
        project = Project(
            name="x",
            data_sources=(CORE, RADAR),
            sport_selections={
                CORE: (SportId.SOCCER, SportId.MMA),
                RADAR: (SportId.MMA, SportId.RUGBY),
            },
        )
        assert project.all_sports() == [SportId.SOCCER, SportId.MMA, SportId.RUGBY]
