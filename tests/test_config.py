"""Tests for the RenderConfig configuration surface."""

import pytest


class TestRenderConfig:
    """Test configuration defaults, validation and serialization."""

    def test_defaults(self):
        from spherefield.config import RenderConfig

        config = RenderConfig()

        assert config.sphere_radius == (3.0, 8.0)
        assert config.spheres_max == 100
        assert config.sphere_placement_radius == 100.0
        assert config.progressive_sampling is True
        assert config.max_samples == 4096
        assert config.seed is None
        assert config.skybox_path is None

    def test_radius_range_coerced_to_floats(self):
        from spherefield.config import RenderConfig

        config = RenderConfig(sphere_radius=[1, 2])
        assert config.sphere_radius == (1.0, 2.0)
        assert isinstance(config.sphere_radius, tuple)

    def test_inverted_radius_range_is_allowed(self):
        """Test that an inverted range is accepted and left to generation."""
        from spherefield.config import RenderConfig

        assert RenderConfig(sphere_radius=(8.0, 3.0)).sphere_radius == (8.0, 3.0)

    def test_negative_sphere_count_rejected(self):
        from spherefield.config import RenderConfig

        with pytest.raises(ValueError, match="spheres_max"):
            RenderConfig(spheres_max=-1)

    @pytest.mark.parametrize("max_samples", [-1, 2**32 - 1])
    def test_max_samples_out_of_range_rejected(self, max_samples):
        from spherefield.config import RenderConfig

        with pytest.raises(ValueError, match="max_samples"):
            RenderConfig(max_samples=max_samples)

    def test_max_samples_upper_limit_accepted(self):
        from spherefield.config import MAX_SAMPLE_LIMIT, RenderConfig

        assert RenderConfig(max_samples=MAX_SAMPLE_LIMIT).max_samples == 2**32 - 2

    def test_generation_key_ignores_sampling_fields(self):
        from spherefield.config import RenderConfig

        a = RenderConfig(seed=3)
        b = RenderConfig(seed=3, max_samples=16, progressive_sampling=False)
        c = RenderConfig(seed=3, spheres_max=10)

        assert a.generation_key() == b.generation_key()
        assert a.generation_key() != c.generation_key()

    def test_dict_round_trip(self):
        from spherefield.config import RenderConfig

        config = RenderConfig(sphere_radius=(1.0, 2.0), spheres_max=5, seed=11)
        data = config.to_dict()

        assert data["sphere_radius"] == [1.0, 2.0]
        assert RenderConfig.from_dict(data) == config

    def test_from_dict_uses_defaults(self):
        from spherefield.config import RenderConfig

        assert RenderConfig.from_dict({"spheres_max": 7}) == RenderConfig(spheres_max=7)

    def test_from_dict_unknown_key_rejected(self):
        from spherefield.config import RenderConfig

        with pytest.raises(ValueError, match="Unknown configuration keys"):
            RenderConfig.from_dict({"sphere_count": 7})
