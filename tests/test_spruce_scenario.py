"""
Scenario tests for a mature spruce, height 15, seed 42.
"""

import pytest


def _spruce(**changes):
    from treegen.specs import TreeSpec

    params = {"generator": "realistic", "species": "spruce", "height": 15.0, "seed": 42, "min_radius": 0.0}
    params.update(changes)
    return TreeSpec(**params)


class TestSpruceSkeleton:
    """The reference spruce skeleton."""

    def test_trunk_ends_at_crown_base(self):
        from treegen.api import generate_skeleton

        segments, _ = generate_skeleton(_spruce())
        trunk = segments[0]
        assert trunk.start == (0.0, 0.0, 0.0)
        assert trunk.end[0] == 0.0
        assert trunk.end[1] == 0.0
        assert trunk.end[2] == pytest.approx(0.3)

    def test_drooping_tips(self, monkeypatch):
        """Spruce tips point lower than the same tree grown with no tip curvature."""
        import dataclasses
        import numpy as np
        from treegen.backends import realistic_backend
        from treegen.backends.realistic_backend import RealisticBackend
        from treegen.params.species import get_species
        from treegen.policies import RealisticPolicy

        assert get_species("spruce").tip_curvature < 0

        def grow():
            # Zero minimum length keeps both runs on the same random sequence.
            policy = RealisticPolicy(min_branch_length=0.0, max_depth=2)
            return RealisticBackend().generate(15.0, 0.0, seed=42, species="spruce", policy=policy)

        curved = grow()
        monkeypatch.setattr(
            realistic_backend,
            "get_species",
            lambda name: dataclasses.replace(get_species(name), tip_curvature=0.0),
        )
        straight = grow()

        assert len(curved) == len(straight)
        compared = 0
        for a, b in zip(curved, straight):
            assert a.level == b.level
            if a.level < 2:
                assert a == b
                continue
            da = np.subtract(a.end, a.start)
            db = np.subtract(b.end, b.start)
            if np.linalg.norm(da) < 1e-6 or np.linalg.norm(db) < 1e-6:
                continue
            assert da[2] / np.linalg.norm(da) < db[2] / np.linalg.norm(db)
            compared += 1
        assert compared > 0

    def test_no_radius_below_printable_floor(self):
        from treegen.api import generate_skeleton

        segments, report = generate_skeleton(_spruce())
        assert report.metadata["min_radius"] >= 0.03 - 1e-12
        assert all(min(s.r1, s.r2) >= 0.03 - 1e-12 for s in segments)

    def test_repeatable(self):
        from treegen.api import generate_skeleton

        a, _ = generate_skeleton(_spruce())
        b, _ = generate_skeleton(_spruce())
        assert a == b

    def test_leader_reaches_crown(self):
        from treegen.api import generate_skeleton

        segments, _ = generate_skeleton(_spruce())
        leader_top = max(s.end[2] for s in segments if s.level == 0)
        assert 0.3 < leader_top <= 15.0


class TestSpruceMesh:
    """The reference spruce assembled and exported."""

    def test_build_and_export(self):
        import numpy as np
        from treegen.api import build_tree, to_binary_stl, parse_binary_stl, scale_for_model_ratio

        spec = _spruce()
        spec.realistic.max_depth = 3
        mesh, report = build_tree(spec)

        assert mesh.num_triangles > 0
        assert mesh.to_trimesh().is_watertight

        data = to_binary_stl(mesh, scale=scale_for_model_ratio(200))
        assert len(data) == 84 + 50 * mesh.num_triangles
        _, triangles = parse_binary_stl(data)
        assert triangles[..., 2].max() == pytest.approx(mesh.vertices[:, 2].max() / 200, rel=1e-5)
        assert np.all(triangles[..., 2] >= -1.0 / 200)
