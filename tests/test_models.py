import pytest

from decision_companion.models import Priority


@pytest.mark.parametrize(
    "importance, expected, label, color",
    [
        (5, 3, "High", "orange"),
        (3, 3, "High", "orange"),
        (2.7, 2, "Medium", "blue"),
        (2, 2, "Medium", "blue"),
        (1, 1, "Low", "gray"),
        (0, 1, "Low", "gray"),
        (-3, 1, "Low", "gray"),
    ],
)
def test_priority_importance_is_clamped(importance, expected, label, color):
    priority = Priority(name="Risk", importance=importance)
    assert priority.importance == expected
    assert priority.label == label
    assert priority.color == color


def test_clamped_priorities_compare_equal():
    assert Priority(name="Risk", importance=9) == Priority(name="Risk", importance=3)
