"""
Unit tests for foliage layout strategies.
"""

import pytest


HEIGHT = 15.0


def _generate(style, seed=42):
    from treegen.ops.foliage import FoliageGenerator

    return FoliageGenerator().generate(HEIGHT, style, seed=seed)


class TestFoliageStrategies:
    """Cluster counts and placement per crown style."""

    def test_conical_layers(self):
        result = _generate("conifer")
        cones = [c for c in result.clusters if c.kind == "cone"]
        spheres = [c for c in result.clusters if c.kind == "sphere"]

        # density 0.7: five layers, two textured spheres each
        assert len(cones) == 5
        assert len(spheres) == 10
        radii = [c.radius for c in cones]
        assert radii == sorted(radii, reverse=True)
        assert all(c.top_radius == pytest.approx(c.radius * 0.1) for c in cones)

    def test_sparse_conical_has_no_texture(self):
        from treegen.params.styles import get_tree_style

        style = get_tree_style("conifer").with_overrides(density=0.4)
        result = _generate(style)
        assert len(result.clusters) == 3
        assert all(c.kind == "cone" for c in result.clusters)

    def test_spherical_stays_above_crown_base(self):
        from treegen.params.styles import get_tree_style

        style = get_tree_style("deciduous")
        result = _generate(style)
        crown_start = HEIGHT * style.crown_base_height

        assert result.clusters[0].position == pytest.approx((0.0, 0.0, crown_start + (HEIGHT - crown_start) / 2))
        assert all(c.position[2] >= crown_start for c in result.clusters)
        assert 1 < len(result.clusters) <= 1 + int(12 * style.crown_density)

    def test_columnar_counts(self):
        result = _generate("cypress")
        assert len(result.clusters) == 9 * 4

    def test_umbrella_fronds(self):
        result = _generate("palm")
        assert len(result.clusters) == 6 * 3 + 1
        assert result.bounding_box.min[2] == pytest.approx(HEIGHT * 0.7 - 3.0)

    def test_irregular_count_and_containment(self):
        from treegen.params.styles import get_tree_style

        style = get_tree_style("shrub")
        result = _generate(style)
        assert len(result.clusters) == int(20 * style.crown_density)

        crown_start = HEIGHT * style.crown_base_height
        width = HEIGHT * style.crown_width_ratio
        for c in result.clusters:
            x, y, z = c.position
            assert -width <= x <= width
            assert -width <= y <= width
            assert crown_start <= z <= HEIGHT

    def test_unknown_style_uses_default(self):
        assert _generate("bonsai").clusters == _generate("deciduous").clusters

    def test_bounding_box_spans_crown(self):
        from treegen.params.styles import get_tree_style

        style = get_tree_style("conifer")
        box = _generate(style).bounding_box
        assert box.max[2] == pytest.approx(HEIGHT)
        assert box.min[2] == pytest.approx(HEIGHT * style.crown_base_height)
        assert box.max[0] == pytest.approx(HEIGHT * style.crown_width_ratio)


class TestFoliageDeterminism:
    """Seeded layouts replay exactly."""

    @pytest.mark.parametrize("style", ["conifer", "deciduous", "shrub", "cypress", "palm"])
    def test_same_seed_same_clusters(self, style):
        assert _generate(style, seed=9).clusters == _generate(style, seed=9).clusters

    def test_generator_reseeds_each_call(self):
        from treegen.ops.foliage import FoliageGenerator

        gen = FoliageGenerator()
        a = gen.generate(HEIGHT, "shrub", seed=1)
        gen.generate(HEIGHT, "shrub", seed=2)
        b = gen.generate(HEIGHT, "shrub", seed=1)
        assert a.clusters == b.clusters

    def test_different_seed_differs(self):
        assert _generate("shrub", seed=1).clusters != _generate("shrub", seed=2).clusters

    def test_invalid_height(self):
        from treegen.ops.foliage import FoliageGenerator

        with pytest.raises(ValueError):
            FoliageGenerator().generate(0.0, "conifer")


class TestBranchTipFoliage:
    """Tests for skeleton tip detection and tip foliage."""

    def _segments(self):
        from treegen.core.types import BranchSegment

        return [
            BranchSegment((0, 0, 0), (0, 0, 1), 0.2, 0.17),
            BranchSegment((0, 0, 1), (1, 0, 2), 0.1, 0.085, level=1),
            BranchSegment((0, 0, 1), (-1, 0, 2), 0.1, 0.085, level=1),
        ]

    def test_branch_tips(self):
        from treegen.ops.foliage import branch_tips

        tips = branch_tips(self._segments())
        assert tips == [(1, 0, 2), (-1, 0, 2)]

    def test_foliage_from_segments(self):
        from treegen.ops.foliage import foliage_from_branch_tips
        from treegen.params.styles import get_tree_style

        clusters = foliage_from_branch_tips(self._segments(), "shrub", base_radius=2.0)
        assert len(clusters) == 2
        assert all(c.kind == "sphere" for c in clusters)
        assert clusters[0].radius == pytest.approx(2.0 * get_tree_style("shrub").foliage_element_size)

    def test_foliage_from_points(self):
        from treegen.ops.foliage import foliage_from_branch_tips

        clusters = foliage_from_branch_tips([(0, 0, 5), (1, 1, 5)], "deciduous")
        assert [c.position for c in clusters] == [(0.0, 0.0, 5.0), (1.0, 1.0, 5.0)]
