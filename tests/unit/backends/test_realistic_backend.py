"""
Unit tests for the envelope-constrained realistic backend.
"""

import pytest


def _generate(**kwargs):
    from treegen.backends.realistic_backend import RealisticBackend

    params = {"height": 15.0, "min_radius": 0.0, "seed": 42}
    params.update(kwargs)
    backend = RealisticBackend()
    return backend, backend.generate(**params)


class TestRealisticDeterminism:
    """Same inputs give the same skeleton."""

    def test_same_seed_same_segments(self):
        _, a = _generate(species="oak")
        _, b = _generate(species="oak")
        assert a == b
        assert len(a) > 10

    def test_reused_backend_reseeds(self):
        from treegen.backends.realistic_backend import RealisticBackend

        backend = RealisticBackend()
        a = list(backend.generate(15.0, 0.0, seed=5))
        backend.generate(15.0, 0.0, seed=99)
        b = backend.generate(15.0, 0.0, seed=5)
        assert a == b

    def test_different_seed_differs(self):
        _, a = _generate(seed=1)
        _, b = _generate(seed=2)
        assert a != b

    def test_unknown_species_matches_linden(self):
        _, a = _generate(species="baobab")
        _, b = _generate(species="linden")
        assert a == b


class TestRealisticRadii:
    """Taper and printable radius floor."""

    @pytest.mark.parametrize("species", ["linden", "oak", "maple", "birch", "spruce", "pine"])
    def test_taper_is_constant(self, species):
        _, segments = _generate(species=species)
        for s in segments:
            assert s.r2 == pytest.approx(s.r1 * 0.85, rel=1e-12)

    def test_custom_taper(self):
        from treegen.policies import RealisticPolicy

        _, segments = _generate(policy=RealisticPolicy(taper_ratio=0.8))
        for s in segments:
            assert s.r2 == pytest.approx(s.r1 * 0.8, rel=1e-12)

    @pytest.mark.parametrize("min_radius", [0.0, 0.05, 0.1])
    @pytest.mark.parametrize("age", ["young", "mature", "old"])
    def test_no_radius_under_floor(self, min_radius, age):
        _, segments = _generate(min_radius=min_radius, age=age, species="maple")
        floor = max(min_radius, 0.03)
        assert segments
        for s in segments:
            assert s.r1 >= floor - 1e-12
            assert s.r2 >= floor - 1e-12

    def test_large_floor_thickens_trunk(self):
        """The trunk is widened so the leader tip still meets the floor."""
        _, segments = _generate(min_radius=0.5, species="birch")
        trunk_like = [s for s in segments if s.level == 0]
        assert min(s.r2 for s in trunk_like) >= 0.5 - 1e-12


class TestRealisticShape:
    """Envelope containment, depth bound and trunk layout."""

    @pytest.mark.parametrize("species", ["linden", "oak", "maple", "birch", "spruce", "pine"])
    def test_branches_inside_envelope(self, species):
        backend, segments = _generate(species=species)
        env = backend.envelope
        for s in segments:
            if s.level >= 1:
                assert env.signed_distance(s.start) <= 1e-6
                assert env.signed_distance(s.end) <= 1e-6

    @pytest.mark.parametrize("species", ["linden", "oak", "maple", "birch", "spruce", "pine"])
    @pytest.mark.parametrize("max_depth", [1, 2, 3, 4, 5, 6])
    def test_depth_bound(self, species, max_depth):
        _, segments = _generate(species=species, max_depth=max_depth)
        assert max(s.level for s in segments) <= max_depth

    @pytest.mark.parametrize("species", ["linden", "oak", "maple", "birch", "spruce", "pine"])
    @pytest.mark.parametrize("age", ["young", "mature", "old"])
    def test_derived_depth_bound(self, species, age):
        from treegen.backends.realistic_backend import MIN_DEPTH
        from treegen.params.species import get_age, get_species

        backend, segments = _generate(species=species, age=age)
        expected = max(MIN_DEPTH, get_species(species).max_branch_levels + get_age(age).max_levels_adjust)
        assert backend.max_depth == expected
        assert max(s.level for s in segments) <= expected

    def test_depth_must_be_positive(self):
        with pytest.raises(ValueError):
            _generate(max_depth=0)

    def test_invalid_height(self):
        with pytest.raises(ValueError):
            _generate(height=0.0)

    def test_trunk_then_leader(self):
        from treegen.params.species import get_species

        _, segments = _generate(species="linden")
        preset = get_species("linden")
        trunk = segments[0]
        assert trunk.start == (0.0, 0.0, 0.0)
        assert trunk.end[2] == pytest.approx(15.0 * preset.trunk_height_ratio)

        leader = [s for s in segments[1:3]]
        assert all(s.level == 0 for s in leader)
        assert leader[0].start == pytest.approx(trunk.end)
        assert leader[0].r1 == pytest.approx(trunk.r2)

    def test_full_leader_uses_three_segments(self):
        _, segments = _generate(species="spruce")
        assert sum(1 for s in segments if s.level == 0) == 4

    def test_trunk_height_override(self):
        _, segments = _generate(trunk_height_override=0.5)
        assert segments[0].end[2] == pytest.approx(7.5)

    def test_denser_crown_has_more_branches(self):
        _, sparse = _generate(crown_density_override=0.3)
        _, dense = _generate(crown_density_override=1.5)
        assert len(dense) > len(sparse)
