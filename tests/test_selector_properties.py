"""
Property-based tests for the task catalog and TaskSelector.
"""

import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from expression_tasks.tasks import (
    DEFAULT_CATALOG,
    EvaluationMode,
    TaskId,
    TaskSelector,
    catalog_for,
    get_task,
)


class TestNoImmediateRepeat:
    """
    *For any* seed and any current task, draw_next never returns the
    current task while the catalog has at least two entries.
    """

    @settings(max_examples=100)
    @given(
        seed=st.integers(min_value=0, max_value=2**32 - 1),
        current=st.sampled_from(list(TaskId)),
    )
    def test_draw_next_never_returns_current(self, seed, current):
        selector = TaskSelector(seed=seed)
        for _ in range(20):
            assert selector.draw_next(current).id != current

    @settings(max_examples=50)
    @given(
        seed=st.integers(min_value=0, max_value=2**32 - 1),
        task_ids=st.lists(st.sampled_from(list(TaskId)), min_size=2, max_size=6, unique=True),
    )
    def test_chained_draws_never_repeat(self, seed, task_ids):
        selector = TaskSelector(catalog_for([t.value for t in task_ids]), seed=seed)

        task = selector.draw_next(None)
        for _ in range(50):
            next_task = selector.draw_next(task.id)
            assert next_task.id != task.id
            task = next_task


class TestNoStarvation:

    def test_all_other_tasks_eventually_drawn(self):
        selector = TaskSelector(seed=1234)
        drawn = {selector.draw_next(TaskId.SMILE).id for _ in range(600)}

        assert drawn == set(TaskId) - {TaskId.SMILE}

    def test_draws_are_roughly_uniform(self):
        selector = TaskSelector(seed=99)
        counts = {task_id: 0 for task_id in TaskId}
        for _ in range(5000):
            counts[selector.draw_next(TaskId.BLINK).id] += 1

        assert counts[TaskId.BLINK] == 0
        for task_id, count in counts.items():
            if task_id is not TaskId.BLINK:
                # expected 1000 each
                assert 800 < count < 1200, f"{task_id}: {count}"


class TestDegenerateCatalogs:

    def test_single_task_catalog_terminates(self):
        selector = TaskSelector(catalog_for(["kiss"]), seed=0)
        assert selector.draw_next(TaskId.KISS).id == TaskId.KISS

    def test_empty_catalog_rejected(self):
        with pytest.raises(ValueError):
            TaskSelector(())

    def test_same_seed_same_sequence(self):
        a = TaskSelector(seed=5)
        b = TaskSelector(seed=5)
        assert [a.draw_next(None).id for _ in range(10)] == \
            [b.draw_next(None).id for _ in range(10)]


class TestCatalog:

    def test_catalog_has_six_distinct_tasks(self):
        assert len(DEFAULT_CATALOG) == 6
        assert {task.id for task in DEFAULT_CATALOG} == set(TaskId)

    def test_evaluation_modes(self):
        assert get_task("smile").mode is EvaluationMode.HOLD
        assert get_task("anger").mode is EvaluationMode.HOLD
        assert get_task("poker_face").mode is EvaluationMode.HOLD
        assert get_task("kiss").mode is EvaluationMode.INSTANT
        assert get_task("dont_smile").mode is EvaluationMode.INSTANT
        assert get_task("blink").mode is EvaluationMode.EDGE

    def test_only_dont_smile_has_failure_message(self):
        with_failure = [task.id for task in DEFAULT_CATALOG if task.failure_message]
        assert with_failure == [TaskId.DONT_SMILE]

    def test_catalog_for_keeps_default_order(self):
        ids = [task.id for task in catalog_for(["blink", "smile", "kiss"])]
        assert ids == [TaskId.SMILE, TaskId.KISS, TaskId.BLINK]

    def test_tasks_are_immutable(self):
        task = get_task(TaskId.SMILE)
        with pytest.raises(AttributeError):
            task.label = "changed"

    def test_unknown_task_id(self):
        with pytest.raises(ValueError):
            get_task("wink")

    def test_selector_find_respects_catalog(self):
        selector = TaskSelector(catalog_for(["smile", "kiss"]), seed=0)

        assert selector.find("kiss").id is TaskId.KISS
        assert selector.find(TaskId.SMILE).id is TaskId.SMILE
        with pytest.raises(ValueError):
            selector.find(TaskId.BLINK)
        with pytest.raises(ValueError):
            selector.find("wink")
