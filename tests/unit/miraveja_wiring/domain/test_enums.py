"""Unit tests for domain enums."""

from miraveja_wiring.domain import Capability, ContainerStage, Lifetime, StagePolicy


class TestLifetime:
    """Test cases for Lifetime enum."""

    def test_lifetime_values(self):
        """Test that Lifetime enum has correct values."""
        assert Lifetime.SINGLETON.value == "singleton"
        assert Lifetime.TRANSIENT.value == "transient"
        assert Lifetime.SCOPED.value == "scoped"

    def test_lifetime_str(self):
        """Test that Lifetime renders as its value."""
        assert str(Lifetime.SCOPED) == "scoped"

    def test_lifetime_from_string(self):
        """Test creating Lifetime from string value."""
        assert Lifetime("singleton") == Lifetime.SINGLETON


class TestStagePolicy:
    """Test cases for StagePolicy enum."""

    def test_policy_members(self):
        """Test that every policy is present."""
        assert [policy.value for policy in StagePolicy] == ["production", "development", "tool"]

    def test_policy_is_string_enum(self):
        """Test that StagePolicy compares equal to its value."""
        assert StagePolicy.PRODUCTION == "production"


class TestContainerStage:
    """Test cases for ContainerStage enum."""

    def test_stage_order(self):
        """Test that stages are declared from the lowest to the highest."""
        assert list(ContainerStage) == [ContainerStage.INIT, ContainerStage.ENVIRONMENT, ContainerStage.MODULE]

    def test_stage_str(self):
        """Test that ContainerStage renders as its value."""
        assert f"{ContainerStage.ENVIRONMENT}" == "environment"


class TestCapability:
    """Test cases for Capability enum."""

    def test_run_phase_order(self):
        """Test the fixed registration order of the run phase."""
        assert Capability.run_phase() == (
            Capability.HEALTH_CHECK,
            Capability.PROVIDER,
            Capability.INJECTABLE_PROVIDER,
            Capability.RESOURCE,
            Capability.TASK,
            Capability.MANAGED,
        )

    def test_initialize_phase_order(self):
        """Test that bundles are registered before commands."""
        assert Capability.initialize_phase() == (Capability.BUNDLE, Capability.COMMAND)

    def test_phases_cover_every_capability(self):
        """Test that each capability belongs to exactly one phase."""
        phases = Capability.run_phase() + Capability.initialize_phase()
        assert sorted(phases) == sorted(Capability)
        assert len(set(phases)) == len(phases)
