"""
Tests for dependency selection and the scramble session.
"""

import copy
import math
import random
from unittest.mock import patch

import pytest

from depscrambler.selector import scramble_dependencies, select_candidates
from depscrambler.session import ScrambleSession
from depscrambler.types import ConflictMode, DependencyType, ScrambleOptions


def make_options(**kwargs) -> ScrambleOptions:
    return ScrambleOptions(**kwargs).clamped()


class TestSelectCandidates:
    """Tests for candidate selection."""

    @pytest.mark.parametrize("count", [1, 2, 3, 7, 10, 23])
    @pytest.mark.parametrize("percentage", [0, 1, 10, 30, 50, 99, 100])
    def test_count_is_ceiling(self, count, percentage):
        names = [f"pkg-{i}" for i in range(count)]
        selected = select_candidates(names, percentage, random.Random(0))
        assert len(selected) == math.ceil(count * percentage / 100)
        assert len(set(selected)) == len(selected)
        assert set(selected) <= set(names)

    def test_single_entry_small_percentage_selects_it(self):
        assert select_candidates(["only"], 10, random.Random(0)) == ["only"]

    def test_input_list_not_reordered(self):
        names = ["a", "b", "c", "d"]
        select_candidates(names, 50, random.Random(3))
        assert names == ["a", "b", "c", "d"]

    def test_every_entry_can_be_chosen(self):
        rng = random.Random(99)
        seen = set()
        for _ in range(200):
            seen.update(select_candidates(["a", "b", "c", "d", "e"], 20, rng))
        assert seen == {"a", "b", "c", "d", "e"}


class TestScrambleSession:
    """Tests for the session bookkeeping."""

    def test_start_copies_manifest(self, sample_pkg):
        session = ScrambleSession.start(sample_pkg)
        session.modified["dependencies"]["react"] = "1.0.0"
        assert sample_pkg["dependencies"]["react"] == "^17.0.2"

    def test_record_tracks_change(self, sample_pkg):
        session = ScrambleSession.start(sample_pkg)
        session.record(DependencyType.DEPENDENCIES, "react", "17.0.5", "changed react")
        assert session.modified["dependencies"]["react"] == "17.0.5"
        assert session.scrambled_deps[DependencyType.DEPENDENCIES] == ["react"]
        assert session.issues == ["changed react"]

    def test_mark_scrambled_is_idempotent(self, sample_pkg):
        session = ScrambleSession.start(sample_pkg)
        session.mark_scrambled(DependencyType.DEPENDENCIES, "react")
        session.mark_scrambled(DependencyType.DEPENDENCIES, "react")
        assert session.scrambled_deps[DependencyType.DEPENDENCIES] == ["react"]

    def test_absent_category_is_empty(self):
        session = ScrambleSession.start({"name": "x", "version": "1.0.0"})
        assert session.dependencies_of(DependencyType.PEER_DEPENDENCIES) == {}
        assert not session.has_category(DependencyType.PEER_DEPENDENCIES)

    def test_to_result(self, sample_pkg):
        session = ScrambleSession.start(sample_pkg)
        result = session.to_result(backup_path="package.json.backup.1")
        assert result.original is sample_pkg
        assert result.backup_path == "package.json.backup.1"
        assert set(result.scrambled_deps) == set(DependencyType)


class TestScrambleDependencies:
    """Tests for the selection step."""

    def test_input_manifest_not_mutated(self, sample_pkg):
        before = copy.deepcopy(sample_pkg)
        scramble_dependencies(
            sample_pkg,
            make_options(scramble_percentage=100, aggression_level=10),
            rng=random.Random(5),
        )
        assert sample_pkg == before

    def test_all_entries_change_when_every_gate_passes(self, sample_pkg, scripted):
        session = scramble_dependencies(
            sample_pkg,
            make_options(
                dependency_types=[DependencyType.DEPENDENCIES],
                scramble_percentage=100,
                aggression_level=10,
            ),
            rng=scripted(fallback=0.0),
        )
        assert session.modified["dependencies"] == {
            "express": "4.16.2",
            "react": "17.0.3",
            "lodash": "4.16.22",
        }
        assert sorted(session.scrambled_deps[DependencyType.DEPENDENCIES]) == ["express", "lodash", "react"]
        assert "Modified dependencies react: ^17.0.2 -> 17.0.3" in session.issues

    def test_end_to_end_example(self, sample_pkg):
        for seed in range(20):
            session = scramble_dependencies(
                sample_pkg,
                make_options(
                    dependency_types=[DependencyType.DEPENDENCIES],
                    scramble_percentage=100,
                    aggression_level=10,
                ),
                rng=random.Random(seed),
            )
            scrambled = session.scrambled_deps[DependencyType.DEPENDENCIES]
            assert session.modified["dependencies"] != sample_pkg["dependencies"]
            assert 1 <= len(scrambled) <= 3
            assert set(scrambled) <= set(sample_pkg["dependencies"])
            for name in scrambled:
                assert session.modified["dependencies"][name] != sample_pkg["dependencies"][name]

    def test_category_isolation(self, sample_pkg):
        for seed in range(20):
            session = scramble_dependencies(
                sample_pkg,
                make_options(
                    dependency_types=[DependencyType.DEPENDENCIES],
                    scramble_percentage=100,
                    aggression_level=10,
                    conflict_mode=ConflictMode.SIMPLE,
                ),
                rng=random.Random(seed),
            )
            assert session.modified["devDependencies"] == sample_pkg["devDependencies"]
            assert session.modified["peerDependencies"] == sample_pkg["peerDependencies"]
            assert session.scrambled_deps[DependencyType.DEV_DEPENDENCIES] == []
            assert session.scrambled_deps[DependencyType.PEER_DEPENDENCIES] == []

    def test_candidate_count_reaches_mutator(self):
        pkg = {"dependencies": {f"pkg-{i}": "^1.0.0" for i in range(7)}}
        with patch("depscrambler.selector.scramble_version", side_effect=lambda v, *a, **k: v) as mock:
            session = scramble_dependencies(
                pkg,
                make_options(
                    dependency_types=[DependencyType.DEPENDENCIES],
                    scramble_percentage=30,
                    conflict_mode=ConflictMode.SIMPLE,
                ),
                rng=random.Random(1),
            )
        assert mock.call_count == 3
        # no-op mutations are not recorded
        assert session.scrambled_deps[DependencyType.DEPENDENCIES] == []
        assert session.issues == []

    def test_zero_percentage_selects_nothing(self, sample_pkg):
        with patch("depscrambler.selector.scramble_version") as mock:
            scramble_dependencies(
                sample_pkg,
                make_options(scramble_percentage=0, conflict_mode=ConflictMode.SIMPLE),
                rng=random.Random(1),
            )
        mock.assert_not_called()

    def test_missing_and_empty_categories_skipped(self):
        pkg = {"name": "x", "version": "1.0.0", "devDependencies": {}}
        session = scramble_dependencies(pkg, make_options(scramble_percentage=100), rng=random.Random(0))
        assert session.modified == pkg
        assert session.issues == []

    def test_opaque_specifiers_left_alone(self):
        pkg = {"dependencies": {"a": "latest", "b": "workspace:*", "c": "github:u/r"}}
        session = scramble_dependencies(
            pkg,
            make_options(scramble_percentage=100, aggression_level=10, conflict_mode=ConflictMode.SIMPLE),
            rng=random.Random(0),
        )
        assert session.modified == pkg

    @pytest.mark.parametrize("mode", list(ConflictMode))
    def test_constraints_keep_major(self, mode):
        pkg = {"dependencies": {"@angular/core": "^15.1.0", "@angular/common": "^15.1.0"}}
        for seed in range(100):
            session = scramble_dependencies(
                pkg,
                make_options(
                    scramble_percentage=100,
                    aggression_level=10,
                    conflict_mode=mode,
                    respect_major_versions=False,
                    version_constraints={"@angular": "^14.0.0"},
                ),
                rng=random.Random(seed),
            )
            for version in session.modified["dependencies"].values():
                assert version.lstrip("^~=").startswith("14.")

    def test_strategist_not_run_in_simple_mode(self, sample_pkg):
        with patch("depscrambler.selector.create_realistic_conflicts") as mock:
            scramble_dependencies(
                sample_pkg,
                make_options(scramble_percentage=100, conflict_mode=ConflictMode.SIMPLE),
                rng=random.Random(0),
            )
        mock.assert_not_called()

    def test_strategist_run_once_per_category(self, sample_pkg):
        with patch(
            "depscrambler.selector.create_realistic_conflicts",
            side_effect=lambda session, *a, **k: session,
        ) as mock:
            scramble_dependencies(
                sample_pkg,
                make_options(scramble_percentage=100, conflict_mode=ConflictMode.PEER_CONFLICT),
                rng=random.Random(0),
            )
        called_types = [call.args[1] for call in mock.call_args_list]
        assert called_types == [
            DependencyType.DEPENDENCIES,
            DependencyType.DEV_DEPENDENCIES,
            DependencyType.PEER_DEPENDENCIES,
        ]
