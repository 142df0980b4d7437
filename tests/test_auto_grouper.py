"""
Unit tests for the auto-grouper.
"""

import pytest

from burstcull.grouping import AutoGrouper, CancellationToken, GroupingState
from burstcull.models import GroupingOptions
from burstcull.similarity import HashLengthError, SSIMResult
from conftest import FakeDecoder, make_record

ZERO = "0" * 16


def fixed_ssim(monkeypatch, score):
    """Make every SSIM comparison return ``score``."""
    monkeypatch.setattr(
        "burstcull.grouping.auto_grouper.calculate_ssim_luminance",
        lambda a, b, *args, **kwargs: SSIMResult(ssim=score, mssim=score),
    )


def add_all(store, records):
    store.add_images(records)
    return records


def memberships(store):
    """Group memberships as sets of file names."""
    images = {img.id: img.file_name for img in store.list_images()}
    return sorted(
        (sorted(images[mid] for mid in group.member_ids) for group in store.list_groups()),
    )


def check_invariants(store):
    groups = store.list_groups()
    images = {img.id: img for img in store.list_images()}
    seen = set()
    for group in groups:
        assert group.size >= 2
        assert group.auto_pick_id in group.member_ids
        for mid in group.member_ids:
            assert mid not in seen
            seen.add(mid)
            assert images[mid].group_id == group.id
            assert images[mid].is_auto_pick == (mid == group.auto_pick_id)
    for img in images.values():
        if img.id not in seen:
            assert img.group_id is None
            assert not img.is_auto_pick


@pytest.fixture
def five_images(temp_store):
    """#1 and #2 are close (distance 3); #3-#5 differ from everything."""
    return add_all(temp_store, [
        make_record("1.jpg", ZERO, focus_score=0.4),
        make_record("2.jpg", "0" * 13 + "fff", focus_score=0.9),
        make_record("3.jpg", "1" * 16),
        make_record("4.jpg", "2" * 16),
        make_record("5.jpg", "3" * 16),
    ])


class TestGroupSimilarImages:
    """Test a full grouping run."""

    def test_five_image_scenario(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.92)
        grouper = AutoGrouper(temp_store, decoder=FakeDecoder())

        groups = grouper.group_similar_images(GroupingOptions(similarity_threshold=15, ssim_threshold=0.8))

        assert len(groups) == 1
        assert memberships(temp_store) == [["1.jpg", "2.jpg"]]
        assert grouper.state == GroupingState.COMPLETED
        check_invariants(temp_store)

    def test_auto_pick_is_best_member(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.92)
        groups = AutoGrouper(temp_store, decoder=FakeDecoder()).group_similar_images()

        assert groups[0].auto_pick_id == five_images[1].id
        assert temp_store.get_image(five_images[1].id).is_auto_pick
        assert not temp_store.get_image(five_images[0].id).is_auto_pick

    def test_ssim_below_threshold_prevents_group(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.5)
        groups = AutoGrouper(temp_store, decoder=FakeDecoder()).group_similar_images()
        assert groups == []
        check_invariants(temp_store)

    def test_without_ssim_refinement(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.0)
        decoder = FakeDecoder()
        groups = AutoGrouper(temp_store, decoder=decoder).group_similar_images(
            GroupingOptions(use_ssim_refinement=False)
        )
        assert len(groups) == 1
        assert decoder.calls == []

    def test_decode_failure_falls_back_to_phash(self, temp_store, five_images):
        decoder = FakeDecoder(fail_on={five_images[1].preview_ref})
        groups = AutoGrouper(temp_store, decoder=decoder).group_similar_images()
        assert memberships(temp_store) == [["1.jpg", "2.jpg"]]
        assert len(groups) == 1

    def test_real_ssim_on_identical_previews(self, temp_store, five_images):
        """The fake decoder returns the same raster for both, so SSIM is 1."""
        groups = AutoGrouper(temp_store, decoder=FakeDecoder()).group_similar_images()
        assert len(groups) == 1

    def test_preview_decoded_once_per_image(self, temp_store):
        add_all(temp_store, [make_record(f"{i}.jpg", ZERO) for i in range(4)])
        decoder = FakeDecoder()
        AutoGrouper(temp_store, decoder=decoder).group_similar_images()
        assert sorted(decoder.calls) == sorted(f"/photos/{i}.jpg" for i in range(4))

    def test_threshold_boundary(self, temp_store):
        add_all(temp_store, [
            make_record("base.jpg", ZERO),
            make_record("at.jpg", "f" * 4 + "0" * 12),
            make_record("over.jpg", "f" * 5 + "0" * 11),
        ])
        AutoGrouper(temp_store, decoder=FakeDecoder()).group_similar_images(
            GroupingOptions(similarity_threshold=4, use_ssim_refinement=False)
        )
        assert memberships(temp_store) == [["at.jpg", "base.jpg"]]

    def test_max_group_size(self, temp_store):
        add_all(temp_store, [make_record(f"{i}.jpg", ZERO) for i in range(7)])
        groups = AutoGrouper(temp_store).group_similar_images(
            GroupingOptions(use_ssim_refinement=False, max_group_size=3)
        )
        assert [g.size for g in groups] == [3, 3]
        assert sum(1 for img in temp_store.list_images() if img.group_id is None) == 1
        check_invariants(temp_store)

    def test_skips_grouped_and_unhashed(self, temp_store):
        records = add_all(temp_store, [
            make_record("a.jpg", ZERO),
            make_record("b.jpg", ZERO),
            make_record("c.jpg", None),
        ])
        grouper = AutoGrouper(temp_store)
        options = GroupingOptions(use_ssim_refinement=False)
        assert len(grouper.group_similar_images(options)) == 1
        assert grouper.group_similar_images(options) == []
        assert temp_store.get_image(records[2].id).group_id is None

    def test_empty_library(self, temp_store):
        grouper = AutoGrouper(temp_store)
        assert grouper.group_similar_images() == []
        assert grouper.state == GroupingState.COMPLETED

    def test_progress_reports(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.92)
        reports = []
        AutoGrouper(temp_store, decoder=FakeDecoder()).group_similar_images(
            GroupingOptions(on_progress=lambda p, t, s: reports.append((p, t, s)))
        )
        assert reports[0] == (0, 5, "Starting grouping process...")
        assert reports[1] == (1, 5, "Grouping 1.jpg...")
        # 2.jpg joined the first group, so it is never a base
        assert [r[0] for r in reports[1:]] == [1, 3, 4, 5]

    def test_updates_project_stats(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.92)
        AutoGrouper(temp_store, decoder=FakeDecoder()).group_similar_images()
        stats = temp_store.get_project_stats()
        assert stats.groups == 1
        assert stats.total_images == 5


class TestCancellation:
    """Test abort during a run."""

    def test_abort_keeps_partial_result(self, temp_store):
        add_all(temp_store, [
            make_record("a1.jpg", ZERO), make_record("a2.jpg", ZERO),
            make_record("b1.jpg", "1" * 16), make_record("b2.jpg", "1" * 16),
            make_record("c1.jpg", "2" * 16), make_record("c2.jpg", "2" * 16),
        ])
        grouper = AutoGrouper(temp_store)

        def on_progress(processed, total, status):
            if processed > 1:
                grouper.abort()

        groups = grouper.group_similar_images(
            GroupingOptions(use_ssim_refinement=False, on_progress=on_progress)
        )

        assert len(groups) == 1
        assert grouper.state == GroupingState.ABORTED
        assert grouper.abort_requested
        assert memberships(temp_store) == [["a1.jpg", "a2.jpg"]]
        check_invariants(temp_store)

    def test_abort_skips_stats_update(self, temp_store):
        add_all(temp_store, [make_record("a.jpg", ZERO), make_record("b.jpg", ZERO)])
        grouper = AutoGrouper(temp_store)
        grouper.group_similar_images(
            GroupingOptions(use_ssim_refinement=False, on_progress=lambda p, t, s: grouper.abort())
        )
        assert grouper.state == GroupingState.ABORTED
        assert temp_store.get_project_stats().updated_at is None

    def test_next_run_starts_fresh(self, temp_store):
        add_all(temp_store, [make_record("a.jpg", ZERO), make_record("b.jpg", ZERO)])
        grouper = AutoGrouper(temp_store)
        grouper.group_similar_images(
            GroupingOptions(use_ssim_refinement=False, on_progress=lambda p, t, s: grouper.abort())
        )
        groups = grouper.group_similar_images(GroupingOptions(use_ssim_refinement=False))
        assert len(groups) == 1
        assert grouper.state == GroupingState.COMPLETED

    def test_abort_when_idle_is_noop(self, temp_store):
        grouper = AutoGrouper(temp_store)
        grouper.abort()
        assert grouper.state == GroupingState.IDLE
        assert not grouper.abort_requested

    def test_token_cancelled_before_run(self, temp_store):
        """A caller-owned token cancelled early stops the run before any group."""
        add_all(temp_store, [make_record("a.jpg", ZERO), make_record("b.jpg", ZERO)])
        token = CancellationToken()
        token.cancel()
        grouper = AutoGrouper(temp_store)

        groups = grouper.group_similar_images(GroupingOptions(use_ssim_refinement=False), token=token)

        assert groups == []
        assert grouper.state == GroupingState.ABORTED
        assert temp_store.list_groups() == []

    def test_abort_after_last_group_still_completes(self, temp_store, monkeypatch):
        """Nothing is left to skip once the final cluster is stored."""
        add_all(temp_store, [make_record("a.jpg", ZERO), make_record("b.jpg", ZERO)])
        grouper = AutoGrouper(temp_store)
        create_group = temp_store.create_group

        def create_then_abort(*args, **kwargs):
            group = create_group(*args, **kwargs)
            grouper.abort()
            return group

        monkeypatch.setattr(temp_store, "create_group", create_then_abort)
        groups = grouper.group_similar_images(GroupingOptions(use_ssim_refinement=False))

        assert len(groups) == 1
        assert grouper.state == GroupingState.COMPLETED
        assert temp_store.get_project_stats().groups == 1


class TestFailures:
    """Test error propagation."""

    def test_storage_failure_sets_failed(self, temp_store, monkeypatch):
        add_all(temp_store, [make_record("a.jpg", ZERO), make_record("b.jpg", ZERO)])

        def broken(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(temp_store, "create_group", broken)
        grouper = AutoGrouper(temp_store)
        with pytest.raises(RuntimeError):
            grouper.group_similar_images(GroupingOptions(use_ssim_refinement=False))
        assert grouper.state == GroupingState.FAILED

    def test_hash_length_mismatch_fails_run(self, temp_store):
        add_all(temp_store, [make_record("a.jpg", ZERO), make_record("b.jpg", "0" * 8)])
        grouper = AutoGrouper(temp_store)
        with pytest.raises(HashLengthError):
            grouper.group_similar_images(GroupingOptions(use_ssim_refinement=False))
        assert grouper.state == GroupingState.FAILED


class TestDisbandAndRegroup:
    """Test disbanding and regrouping."""

    def test_disband_all(self, temp_store, five_images, monkeypatch):
        fixed_ssim(monkeypatch, 0.92)
        grouper = AutoGrouper(temp_store, decoder=FakeDecoder())
        grouper.group_similar_images()

        assert grouper.disband_all_groups() == 1
        assert temp_store.list_groups() == []
        assert temp_store.get_project_stats().groups == 0
        check_invariants(temp_store)

    def test_regroup_is_idempotent(self, temp_store):
        add_all(temp_store, [
            make_record("a1.jpg", ZERO), make_record("a2.jpg", ZERO),
            make_record("b1.jpg", "1" * 16), make_record("b2.jpg", "1" * 16),
            make_record("b3.jpg", "1" * 15 + "2"),
            make_record("solo.jpg", "3" * 16),
        ])
        grouper = AutoGrouper(temp_store)
        options = GroupingOptions(use_ssim_refinement=False)

        grouper.group_similar_images(options)
        first = memberships(temp_store)
        first_ids = {g.id for g in temp_store.list_groups()}

        grouper.regroup_all(options)
        assert memberships(temp_store) == first
        assert first == [["a1.jpg", "a2.jpg"], ["b1.jpg", "b2.jpg", "b3.jpg"]]
        assert first_ids.isdisjoint(g.id for g in temp_store.list_groups())
        check_invariants(temp_store)

    def test_abort_during_disband_stops_regroup(self, temp_store, monkeypatch):
        add_all(temp_store, [
            make_record("a1.jpg", ZERO), make_record("a2.jpg", ZERO),
            make_record("b1.jpg", "1" * 16), make_record("b2.jpg", "1" * 16),
        ])
        grouper = AutoGrouper(temp_store)
        options = GroupingOptions(use_ssim_refinement=False)
        grouper.group_similar_images(options)
        before = {g.id for g in temp_store.list_groups()}
        assert len(before) == 2

        disband_group = temp_store.disband_group

        def disband_then_abort(group_id):
            result = disband_group(group_id)
            grouper.abort()
            return result

        monkeypatch.setattr(temp_store, "disband_group", disband_then_abort)
        groups = grouper.regroup_all(options)

        assert groups == []
        assert grouper.state == GroupingState.ABORTED
        remaining = {g.id for g in temp_store.list_groups()}
        assert len(remaining) == 1
        assert remaining <= before
        check_invariants(temp_store)
